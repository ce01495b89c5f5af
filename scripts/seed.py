from app.core.config import settings
from app.core.logging import setup_logging
from app.db.session import engine, Session, init_db
from app.db.seed import seed_admin


def run_seed():
    setup_logging(settings.LOG_LEVEL)
    init_db()
    with Session(engine) as session:
        seed_admin(
            session,
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
        )


if __name__ == "__main__":
    run_seed()
