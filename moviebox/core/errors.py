"""
Taxonomie des erreurs du catalogue.

Chaque erreur porte la categorie et le code HTTP vers lesquels la couche web
la traduit. Les erreurs de validation sont levees avant tout acces au stockage ;
les cascades re-levent ces erreurs telles quelles et enveloppent toute autre
exception dans InternalError.
"""

from typing import Optional


class CatalogError(Exception):
    """
    Erreur de base du catalogue.

    Attributes:
        status_code: Code HTTP associe a la categorie
        category: Categorie exposee au client (not_found, bad_request, ...)
        message: Message lisible
    """

    status_code = 500
    category = "server_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    @property
    def public_message(self) -> str:
        """Message transmissible au client."""
        return self.message


class InvalidArgumentError(CatalogError):
    """Identifiant mal forme, note hors bornes, date ou enumeration invalide."""

    status_code = 400
    category = "bad_request"


class NotFoundError(CatalogError):
    """L'entite referencee n'existe pas."""

    status_code = 404
    category = "not_found"

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class ConflictError(CatalogError):
    """Violation d'unicite (numero de saison/episode, filmographie, username...)."""

    status_code = 409
    category = "conflict"


class InternalError(CatalogError):
    """
    Echec inattendu du stockage ou d'une transaction.

    Le message detaille (operation + cause) reste dans les logs ; le client
    ne recoit qu'un message generique.
    """

    status_code = 500
    category = "server_error"

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        detail = f"Failed to {operation}"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)

    @property
    def public_message(self) -> str:
        return f"Failed to {self.operation}"
