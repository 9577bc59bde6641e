"""
Delimitation des unites de travail pour les services d'agregats.

Une mutation en cascade s'execute dans un seul bloc `transactional` :
- sans unite ambiante, une unite est ouverte, validee a la sortie normale du
  bloc et annulee sur toute exception ;
- avec une unite ambiante (appel imbrique dans une cascade), le bloc y
  participe et laisse l'appelant valider ou annuler.

Les erreurs du catalogue remontent telles quelles ; toute autre exception est
enveloppee dans InternalError en nommant l'operation.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from loguru import logger

from moviebox.core.errors import CatalogError, InternalError
from moviebox.core.ports.unit_of_work import IUnitOfWork, UnitOfWorkFactory


@asynccontextmanager
async def transactional(
    uow_factory: UnitOfWorkFactory,
    operation: str,
    uow: Optional[IUnitOfWork] = None,
) -> AsyncIterator[IUnitOfWork]:
    """
    Ouvre (ou rejoint) une unite de travail pour `operation`.

    Args:
        uow_factory: Fabrique d'unites de travail
        operation: Nom de l'operation, repris dans InternalError ("create season")
        uow: Unite ambiante a rejoindre, le cas echeant

    Yields:
        L'unite de travail a utiliser pour toutes les ecritures du bloc
    """
    if uow is not None:
        yield uow
        return

    try:
        async with uow_factory() as unit:
            yield unit
            await unit.commit()
    except CatalogError as exc:
        logger.warning("Transaction annulee", operation=operation, error=exc.message)
        raise
    except Exception as exc:
        logger.warning("Transaction annulee sur erreur inattendue", operation=operation, error=str(exc))
        raise InternalError(operation, exc) from exc
