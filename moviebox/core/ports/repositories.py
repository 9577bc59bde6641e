"""
Interfaces ports pour les repositories.

Interfaces abstraites (ports) définissant les contrats pour la persistance des données.
Toutes les opérations sont asynchrones et s'exécutent dans la session de
l'unité de travail qui a créé le repository : elles participent donc à la
transaction en cours.

Les listes de références (saisons d'une série, épisodes d'une saison,
filmographie, abonnements) ont une sémantique d'ensemble : les méthodes
d'ajout retournent False si l'élément est déjà présent, les méthodes de
retrait retournent False s'il est absent.
"""

from abc import ABC, abstractmethod
from typing import Optional

from moviebox.core.entities.media import Episode, Movie, Person, Season, TvShow
from moviebox.core.entities.social import Notification, Review, User
from moviebox.core.value_objects.filters import MovieFilter, ReviewFilter
from moviebox.core.value_objects.pagination import PageRequest


class IMovieRepository(ABC):
    """Interface de stockage des films."""

    @abstractmethod
    async def get_by_id(self, movie_id: str) -> Optional[Movie]:
        """Récupère un film par son ID."""
        ...

    @abstractmethod
    async def exists(self, movie_id: str) -> bool:
        """Vérifie l'existence d'un film."""
        ...

    @abstractmethod
    async def add(self, movie: Movie) -> Movie:
        """Insère un nouveau film."""
        ...

    @abstractmethod
    async def update(self, movie: Movie) -> Movie:
        """Met à jour un film existant (métadonnées, casting, équipe)."""
        ...

    @abstractmethod
    async def delete(self, movie_id: str) -> bool:
        """Supprime un film. Retourne True si supprimé."""
        ...

    @abstractmethod
    async def list_page(
        self, request: PageRequest, genre: Optional[str] = None
    ) -> tuple[list[Movie], int]:
        """Liste paginée, filtrable par genre. Retourne (films, total)."""
        ...

    @abstractmethod
    async def search(self, text: str) -> list[Movie]:
        """Recherche plein texte (titre, résumé)."""
        ...

    @abstractmethod
    async def find_matching(self, criteria: MovieFilter) -> list[Movie]:
        """Retourne les films satisfaisant tous les critères."""
        ...

    @abstractmethod
    async def list_sorted(
        self, sort_by: str, limit: int, descending: bool = True, active_only: bool = False
    ) -> list[Movie]:
        """Liste triée sur un champ (popularité, note...)."""
        ...

    @abstractmethod
    async def list_released(self, limit: int, upcoming: bool = False) -> list[Movie]:
        """Films déjà sortis (récents d'abord) ou à venir (prochains d'abord)."""
        ...

    @abstractmethod
    async def find_by_genres(
        self, genres: list[str], exclude_id: str, limit: int
    ) -> list[Movie]:
        """Films partageant au moins un genre, hors exclude_id."""
        ...

    @abstractmethod
    async def apply_vote(self, movie_id: str, rating: float) -> Optional[Movie]:
        """Intègre une note dans la moyenne des votes."""
        ...


class IPersonRepository(ABC):
    """Interface de stockage des personnes."""

    @abstractmethod
    async def get_by_id(self, person_id: str) -> Optional[Person]:
        """Récupère une personne par son ID."""
        ...

    @abstractmethod
    async def exists(self, person_id: str) -> bool:
        """Vérifie l'existence d'une personne."""
        ...

    @abstractmethod
    async def get_many(self, person_ids: list[str]) -> list[Person]:
        """Récupère plusieurs personnes (les IDs inconnus sont ignorés)."""
        ...

    @abstractmethod
    async def add(self, person: Person) -> Person:
        """Insère une nouvelle personne."""
        ...

    @abstractmethod
    async def update(self, person: Person) -> Person:
        """Met à jour une personne existante."""
        ...

    @abstractmethod
    async def delete(self, person_id: str) -> bool:
        """Supprime une personne. Retourne True si supprimée."""
        ...

    @abstractmethod
    async def list_page(
        self,
        request: PageRequest,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Person], int]:
        """Liste paginée filtrable par rôle et texte."""
        ...

    @abstractmethod
    async def list_trending(self, limit: int) -> list[Person]:
        """Personnes actives les plus populaires."""
        ...

    @abstractmethod
    async def add_to_filmography(self, person_id: str, movie_id: str) -> bool:
        """Ajoute un film à la filmographie (False si déjà présent)."""
        ...

    @abstractmethod
    async def remove_from_filmography(self, person_id: str, movie_id: str) -> bool:
        """Retire un film de la filmographie (False si absent)."""
        ...

    @abstractmethod
    async def remove_movie_everywhere(self, movie_id: str) -> int:
        """Retire un film de toutes les filmographies. Retourne le nombre de personnes modifiées."""
        ...

    @abstractmethod
    async def find_sharing_filmography(
        self, person_id: str, movie_ids: list[str], limit: int
    ) -> list[Person]:
        """Autres personnes partageant au moins un film, par popularité décroissante."""
        ...


class ITvShowRepository(ABC):
    """Interface de stockage des séries TV (racine de l'agrégat)."""

    @abstractmethod
    async def get_by_id(self, tv_show_id: str) -> Optional[TvShow]:
        """Récupère une série par son ID."""
        ...

    @abstractmethod
    async def exists(self, tv_show_id: str) -> bool:
        """Vérifie l'existence d'une série."""
        ...

    @abstractmethod
    async def add(self, tv_show: TvShow) -> TvShow:
        """Insère une nouvelle série."""
        ...

    @abstractmethod
    async def update(self, tv_show: TvShow) -> TvShow:
        """Met à jour les métadonnées, le casting et l'équipe."""
        ...

    @abstractmethod
    async def delete(self, tv_show_id: str) -> bool:
        """Supprime la ligne de la série (sans cascade)."""
        ...

    @abstractmethod
    async def list_page(
        self,
        request: PageRequest,
        genre: Optional[str] = None,
        search: Optional[str] = None,
        country: Optional[str] = None,
    ) -> tuple[list[TvShow], int]:
        """Liste paginée filtrable."""
        ...

    @abstractmethod
    async def list_trending(self, limit: int) -> list[TvShow]:
        """Séries actives les plus populaires."""
        ...

    @abstractmethod
    async def find_by_genres(
        self, genres: list[str], exclude_id: str, limit: int
    ) -> list[TvShow]:
        """Séries partageant au moins un genre, par popularité décroissante."""
        ...

    @abstractmethod
    async def add_season(self, tv_show_id: str, season_id: str) -> bool:
        """Ajoute une saison à l'ensemble des saisons."""
        ...

    @abstractmethod
    async def remove_season(self, tv_show_id: str, season_id: str) -> bool:
        """Retire une saison de l'ensemble des saisons."""
        ...

    @abstractmethod
    async def increment_popularity(self, tv_show_id: str, delta: float) -> None:
        """Incrément additif de la popularité."""
        ...

    @abstractmethod
    async def apply_rating(self, tv_show_id: str, rating: float) -> Optional[TvShow]:
        """Intègre une note dans la moyenne (moyenne et compteur ensemble)."""
        ...


class ISeasonRepository(ABC):
    """Interface de stockage des saisons."""

    @abstractmethod
    async def get_by_id(self, season_id: str) -> Optional[Season]:
        """Récupère une saison par son ID."""
        ...

    @abstractmethod
    async def find_by_number(self, tv_show_id: str, season_number: int) -> Optional[Season]:
        """Récupère la saison portant ce numéro dans la série."""
        ...

    @abstractmethod
    async def add(self, season: Season) -> Season:
        """Insère une saison (ConflictError si le numéro existe déjà)."""
        ...

    @abstractmethod
    async def update(self, season: Season) -> Season:
        """Met à jour les métadonnées (la série et le numéro restent inchangés)."""
        ...

    @abstractmethod
    async def delete(self, season_id: str) -> bool:
        """Supprime la ligne de la saison (sans cascade)."""
        ...

    @abstractmethod
    async def list_page(
        self,
        request: PageRequest,
        tv_show_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Season], int]:
        """Liste paginée, filtrable par série."""
        ...

    @abstractmethod
    async def list_ids_by_tv_show(self, tv_show_id: str) -> list[str]:
        """IDs de toutes les saisons rattachées à la série."""
        ...

    @abstractmethod
    async def list_by_tv_shows(
        self, tv_show_ids: list[str], exclude_id: str, limit: int
    ) -> list[Season]:
        """Saisons des séries données, par popularité décroissante."""
        ...

    @abstractmethod
    async def list_trending(self, limit: int) -> list[Season]:
        """Saisons les plus populaires."""
        ...

    @abstractmethod
    async def delete_by_tv_show(self, tv_show_id: str) -> int:
        """Supprime toutes les saisons de la série. Retourne le nombre supprimé."""
        ...

    @abstractmethod
    async def add_episode(self, season_id: str, episode_id: str) -> bool:
        """Ajoute un épisode à l'ensemble des épisodes."""
        ...

    @abstractmethod
    async def remove_episode(self, season_id: str, episode_id: str) -> bool:
        """Retire un épisode de l'ensemble des épisodes."""
        ...

    @abstractmethod
    async def increment_popularity(self, season_id: str, delta: float) -> None:
        """Incrément additif de la popularité."""
        ...

    @abstractmethod
    async def apply_rating(self, season_id: str, rating: float) -> Optional[Season]:
        """Intègre une note dans la moyenne."""
        ...


class IEpisodeRepository(ABC):
    """Interface de stockage des épisodes."""

    @abstractmethod
    async def get_by_id(self, episode_id: str) -> Optional[Episode]:
        """Récupère un épisode par son ID."""
        ...

    @abstractmethod
    async def find_by_number(self, season_id: str, episode_number: int) -> Optional[Episode]:
        """Récupère l'épisode portant ce numéro dans la saison."""
        ...

    @abstractmethod
    async def add(self, episode: Episode) -> Episode:
        """Insère un épisode (ConflictError si le numéro existe déjà)."""
        ...

    @abstractmethod
    async def update(self, episode: Episode) -> Episode:
        """Met à jour les métadonnées (la saison et le numéro restent inchangés)."""
        ...

    @abstractmethod
    async def delete(self, episode_id: str) -> bool:
        """Supprime un épisode."""
        ...

    @abstractmethod
    async def list_page(
        self,
        request: PageRequest,
        season_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Episode], int]:
        """Liste paginée, filtrable par saison et texte (titre, résumé)."""
        ...

    @abstractmethod
    async def list_by_season(self, season_id: str) -> list[Episode]:
        """Tous les épisodes d'une saison, par numéro."""
        ...

    @abstractmethod
    async def list_by_seasons(
        self, season_ids: list[str], exclude_id: str, limit: int
    ) -> list[Episode]:
        """Épisodes des saisons données, par popularité décroissante."""
        ...

    @abstractmethod
    async def list_trending(self, limit: int) -> list[Episode]:
        """Épisodes les plus populaires."""
        ...

    @abstractmethod
    async def count_by_seasons(self, season_ids: list[str]) -> int:
        """Nombre d'épisodes rattachés à ces saisons."""
        ...

    @abstractmethod
    async def delete_by_seasons(self, season_ids: list[str]) -> int:
        """Supprime tous les épisodes de ces saisons. Retourne le nombre supprimé."""
        ...

    @abstractmethod
    async def increment_popularity(self, episode_id: str, delta: float) -> None:
        """Incrément additif de la popularité."""
        ...

    @abstractmethod
    async def apply_rating(self, episode_id: str, rating: float) -> Optional[Episode]:
        """Intègre une note dans la moyenne."""
        ...


class IUserRepository(ABC):
    """Interface de stockage des utilisateurs et de leurs abonnements."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Récupère un utilisateur par son ID."""
        ...

    @abstractmethod
    async def get_many(self, user_ids: list[str]) -> list[User]:
        """Récupère plusieurs utilisateurs (les IDs inconnus sont ignorés)."""
        ...

    @abstractmethod
    async def find_conflicting(
        self,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[str] = None,
    ) -> Optional[User]:
        """Premier autre utilisateur ayant ce username ou cet email."""
        ...

    @abstractmethod
    async def add(self, user: User) -> User:
        """Insère un utilisateur (ConflictError si username/email pris)."""
        ...

    @abstractmethod
    async def update(self, user: User) -> User:
        """Met à jour le profil (hors abonnements)."""
        ...

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        """Supprime un utilisateur."""
        ...

    @abstractmethod
    async def list_page(
        self,
        request: PageRequest,
        role: Optional[str] = None,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> tuple[list[User], int]:
        """Liste paginée filtrable."""
        ...

    @abstractmethod
    async def add_following(self, user_id: str, target_id: str) -> bool:
        """Ajout conditionnel de target_id aux abonnements de user_id."""
        ...

    @abstractmethod
    async def add_follower(self, user_id: str, follower_id: str) -> bool:
        """Ajout conditionnel de follower_id aux abonnés de user_id."""
        ...

    @abstractmethod
    async def remove_following(self, user_id: str, target_id: str) -> bool:
        """Retrait de target_id des abonnements de user_id."""
        ...

    @abstractmethod
    async def remove_follower(self, user_id: str, follower_id: str) -> bool:
        """Retrait de follower_id des abonnés de user_id."""
        ...


class IReviewRepository(ABC):
    """Interface de stockage des critiques."""

    @abstractmethod
    async def get_by_id(self, review_id: str) -> Optional[Review]:
        """Récupère une critique par son ID."""
        ...

    @abstractmethod
    async def add(self, review: Review) -> Review:
        """Insère une critique."""
        ...

    @abstractmethod
    async def update(self, review: Review) -> Review:
        """Met à jour la note et le commentaire."""
        ...

    @abstractmethod
    async def delete(self, review_id: str) -> bool:
        """Supprime une critique."""
        ...

    @abstractmethod
    async def find(self, criteria: ReviewFilter) -> list[Review]:
        """Critiques satisfaisant tous les critères renseignés."""
        ...


class INotificationRepository(ABC):
    """Interface de stockage des notifications."""

    @abstractmethod
    async def add(self, notification: Notification) -> Notification:
        """Enregistre une notification."""
        ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[Notification]:
        """Notifications d'un utilisateur, plus récentes d'abord."""
        ...
