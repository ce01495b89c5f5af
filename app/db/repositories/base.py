from typing import Any, Dict, Generic, Iterable, Optional, Type, TypeVar
from sqlmodel import SQLModel, Session, select

# Type générique pour le modèle (User, Video, Reaction, etc.)
ModelT = TypeVar("ModelT", bound=SQLModel)

class BaseRepository(Generic[ModelT]):
    """
    Repository de base : persistance générique, aucune logique métier.

    👉 Les repositories concrets définissent `model = MaClasseSQLModel`.
    👉 Chaque écriture accepte `commit=False` : le service orchestre alors
       la transaction (flush seulement, commit/rollback à sa charge).
    """

    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    def _persist(self, entity: Optional[ModelT], commit: bool) -> None:
        if commit:
            self.session.commit()
            if entity is not None:
                self.session.refresh(entity)
        else:
            # flush : l'ID est connu (utile pour les FKs) sans clore la transaction
            self.session.flush()

    # ---------- READ ----------

    def get(self, id_: Any) -> Optional[ModelT]:
        return self.session.get(self.model, id_)

    def get_many(self, ids: Iterable[int]) -> Dict[int, ModelT]:
        """Charge plusieurs enregistrements en une requête, indexés par id."""
        wanted = {i for i in ids if i is not None}
        if not wanted:
            return {}
        rows = self.session.exec(select(self.model).where(self.model.id.in_(wanted))).all()
        return {row.id: row for row in rows}

    # ---------- WRITE ----------

    def create(self, *, commit: bool = True, **fields) -> ModelT:
        entity = self.model(**fields)
        self.session.add(entity)
        self._persist(entity, commit)
        return entity

    def update(self, entity: ModelT, *, commit: bool = True, **changes) -> ModelT:
        for key, value in changes.items():
            setattr(entity, key, value)
        self.session.add(entity)
        self._persist(entity, commit)
        return entity

    def delete(self, entity: ModelT, *, commit: bool = True) -> None:
        self.session.delete(entity)
        self._persist(None, commit)
