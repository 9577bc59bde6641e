"""
Collaborateur de notifications persistant.

Enregistre chaque notification dans sa propre unite de travail, independante
de la transaction qui l'a declenchee.
"""

from loguru import logger

from moviebox.core.entities.social import Notification
from moviebox.core.ports.notifications import INotifier
from moviebox.core.ports.unit_of_work import UnitOfWorkFactory


class StoredNotifier(INotifier):
    """Envoie les notifications en les stockant dans la table notifications."""

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    async def notify_user(self, notification: Notification) -> None:
        async with self._uow_factory() as uow:
            stored = await uow.notifications.add(notification)
            await uow.commit()
        logger.info(
            "Notification envoyee",
            user_id=stored.user_id,
            type=stored.type,
            notification_id=stored.id,
        )
