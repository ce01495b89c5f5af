"""
➡️ But : Moteur de base de données et sessions par requête.

engine : construit depuis DATABASE_URL (SQLite `SQLITE_PATH` par défaut).

init_db() : crée les tables des modèles importés ci-dessous.

get_session() : dépendance FastAPI, une session par requête, fermée en sortie.
"""

from typing import Any, Dict

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

# Les modèles doivent être importés pour être enregistrés dans la metadata
from app.db.models.users import User  # noqa: F401
from app.db.models.videos import Video, VideoTag  # noqa: F401
from app.db.models.reactions import Reaction  # noqa: F401
from app.db.models.subscriptions import Subscription  # noqa: F401
from app.db.models.watch_history import WatchHistory  # noqa: F401

from app.core.config import settings


def _build_engine() -> Engine:
    url = settings.DATABASE_URL
    sqlite = url.startswith("sqlite:")

    connect_args: Dict[str, Any] = {}
    if sqlite:
        # sessions ouvertes dans le threadpool de FastAPI
        connect_args["check_same_thread"] = False

    return create_engine(
        url,
        echo=(settings.ENV == "dev"),
        connect_args=connect_args,
        pool_pre_ping=not sqlite,
    )


engine: Engine = _build_engine()


def init_db(bind: Engine = engine) -> None:
    SQLModel.metadata.create_all(bind)


def get_session():
    with Session(engine) as session:
        yield session
