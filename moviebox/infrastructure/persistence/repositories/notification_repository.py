"""
Implementation SQLModel du repository Notification.
"""

from sqlmodel import select

from moviebox.core.entities.social import Notification
from moviebox.core.ports.repositories import INotificationRepository
from moviebox.core.value_objects.identifiers import new_id
from moviebox.infrastructure.persistence.models import NotificationModel
from moviebox.infrastructure.persistence.repositories.base import SQLModelRepository


class SQLModelNotificationRepository(
    SQLModelRepository[NotificationModel], INotificationRepository
):
    """Repository SQLModel pour les notifications."""

    model = NotificationModel
    entity_name = "Notification"
    sortable_fields = frozenset({"created_at"})

    def _to_entity(self, model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            sender_id=model.sender_id,
            type=model.type,
            message=model.message,
            is_read=model.is_read,
            created_at=model.created_at,
        )

    async def add(self, notification: Notification) -> Notification:
        model = NotificationModel(
            id=notification.id or new_id(),
            user_id=notification.user_id,
            sender_id=notification.sender_id,
            type=notification.type,
            message=notification.message,
            is_read=notification.is_read,
        )
        model = await self._insert(model, f"Notification {model.id} already exists")
        return self._to_entity(model)

    async def list_for_user(self, user_id: str) -> list[Notification]:
        statement = select(NotificationModel).where(NotificationModel.user_id == user_id)
        statement = statement.order_by(*self._ordering("created_at", True))
        return [self._to_entity(model) for model in await self._all(statement)]
