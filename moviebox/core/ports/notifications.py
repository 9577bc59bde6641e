"""
Port du collaborateur de notifications.

L'envoi est "fire-and-forget" du point de vue des services appelants : un
échec ne doit jamais annuler la mutation qui l'a déclenché.
"""

from abc import ABC, abstractmethod

from moviebox.core.entities.social import Notification


class INotifier(ABC):
    """Contrat d'envoi de notifications aux utilisateurs."""

    @abstractmethod
    async def notify_user(self, notification: Notification) -> None:
        """Envoie une notification à notification.user_id."""
        ...
