"""
Configuration du logging de MovieBox via loguru.

Fournit un logging structuré avec :
- Sortie console : colorée, avec le composant émetteur (catalog, sqlalchemy, uvicorn...)
- Sortie fichier : sérialisée en JSON, avec rotation, pour l'analyse historique
- Redirection du module logging standard (SQLAlchemy, uvicorn, FastAPI) vers loguru
"""

import logging
import sys
from pathlib import Path

from loguru import logger

# Loggers standards redirigés, avec le composant affiché pour chacun
INTERCEPTED_LOGGERS = {
    "sqlalchemy.engine": "sqlalchemy",
    "sqlalchemy.pool": "sqlalchemy",
    "uvicorn": "uvicorn",
    "uvicorn.access": "uvicorn",
    "uvicorn.error": "uvicorn",
    "fastapi": "web",
}

DEFAULT_COMPONENT = "catalog"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[component]: <10}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Handler logging standard qui réémet chaque enregistrement dans loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Remonte jusqu'au code appelant hors du module logging
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        component = _component_for(record.name)
        logger.bind(component=component, stdlib_logger=record.name).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


def _component_for(logger_name: str) -> str:
    """Composant du logger standard le plus specifique qui englobe `logger_name`."""
    parts = logger_name.split(".")
    while parts:
        name = ".".join(parts)
        if name in INTERCEPTED_LOGGERS:
            return INTERCEPTED_LOGGERS[name]
        parts.pop()
    return logger_name.split(".")[0] or DEFAULT_COMPONENT


def intercept_standard_logging(database_echo: bool = False) -> None:
    """
    Redirige le logging standard vers loguru.

    Les requetes SQL (sqlalchemy.engine) ne passent qu'en mode echo ;
    sinon seuls les avertissements de SQLAlchemy sont conservés.
    """
    handler = InterceptHandler()
    logging.basicConfig(handlers=[handler], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False

    sql_level = logging.INFO if database_echo else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


def configure_logging(
    log_level: str = "INFO",
    log_file: Path = Path("logs/moviebox.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
    database_echo: bool = False,
) -> None:
    """Configure le logging de l'application.

    Args :
        log_level : Niveau de log minimum pour la sortie console (DEBUG, INFO, WARNING, ERROR)
        log_file : Chemin vers le fichier de log
        rotation_size : Taille maximale du fichier avant rotation (ex: "10 MB", "1 GB")
        retention_count : Nombre de fichiers rotatifs à conserver
        database_echo : Journalise les requetes SQL emises par SQLAlchemy
    """
    logger.remove()
    logger.configure(extra={"component": DEFAULT_COMPONENT})

    logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT, colorize=True)

    # Handler fichier - JSON pour l'analyse (cascades et invalidations en DEBUG)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,
    )

    intercept_standard_logging(database_echo)
    logger.debug(
        "Logging configuré",
        log_file=str(log_file),
        rotation=rotation_size,
        database_echo=database_echo,
    )


def configure_logging_from_settings(settings) -> None:
    """Applique la section logging de `Settings`."""
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
        database_echo=settings.database_echo,
    )
