"""
Traduction des erreurs du catalogue en reponses HTTP.

Corps de reponse : {"error": <categorie>, "message": <message>}.
Les erreurs internes ne transmettent qu'un message generique ; le detail
(cause de stockage) reste dans les logs.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from ..core.errors import CatalogError, InternalError


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("Erreur interne", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.category, "message": exc.public_message},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Enregistre le gestionnaire commun a toutes les erreurs du catalogue."""
    app.add_exception_handler(CatalogError, catalog_error_handler)
