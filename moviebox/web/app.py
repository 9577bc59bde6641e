"""
Application FastAPI de MovieBox.

Initialise l'application web avec le Container DI, cree les tables au
demarrage et monte les routes.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from loguru import logger

from .. import __version__
from ..container import Container
from ..infrastructure.persistence.database import init_db
from ..logging_config import configure_logging_from_settings
from .errors import register_error_handlers
from .routes.catalog import router as catalog_router
from .routes.users import router as users_router


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Construit l'application.

    Args:
        container: Container a utiliser (un nouveau Container par defaut)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialise le Container DI au demarrage et libere ses ressources a l'arret."""
        active = container
        if active is None:
            # Serveur lance par uvicorn : ses loggers passent par loguru
            active = Container()
            configure_logging_from_settings(active.config())
        await init_db(active.engine())
        active.init_resources()
        app.state.container = active
        logger.info("API MovieBox demarree", version=__version__)
        yield
        active.shutdown_resources()
        active.cache().close()
        await active.engine().dispose()

    app = FastAPI(title="MovieBox", version=__version__, lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(catalog_router)
    app.include_router(users_router)
    return app


app = create_app()
