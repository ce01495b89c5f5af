import logging
import logging.config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure le logger racine une seule fois (appelé au démarrage de l'app)."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {"class": "logging.StreamHandler", "formatter": "default"},
            },
            "root": {"level": level.upper(), "handlers": ["console"]},
            "loggers": {
                # le SQL echo de SQLAlchemy reste piloté par create_engine(echo=...)
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )
