from typing import Any, Optional

# plus grand INTEGER SQL signé (SQLite, Postgres BIGINT)
MAX_DB_ID = 2**63 - 1


def positive_db_id(value: Any) -> Optional[int]:
    """Entier ASCII strictement positif et stockable en base, sinon None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        parsed = value
    else:
        text = str(value).strip() if value is not None else ""
        # isdigit() seul accepte "²" ou "٣"
        if not (text.isascii() and text.isdigit()):
            return None
        parsed = int(text)
    if parsed <= 0 or parsed > MAX_DB_ID:
        return None
    return parsed
