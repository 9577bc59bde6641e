"""
Service des critiques.

Chaque operation est relancee sur erreur transitoire du stockage
(backoff exponentiel, nombre de tentatives borne) ; apres epuisement,
l'erreur remonte a l'appelant.
"""

from typing import Optional

from loguru import logger

from moviebox.core.entities.social import Review
from moviebox.core.errors import NotFoundError
from moviebox.core.ports.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from moviebox.core.value_objects.catalog import ReviewTargetType, normalize_enum
from moviebox.core.value_objects.filters import ReviewFilter
from moviebox.core.value_objects.identifiers import ensure_valid_id, new_id
from moviebox.infrastructure.persistence.retry import run_with_retry
from moviebox.services.transactions import transactional
from moviebox.services.validation import ensure_valid_rating


class ReviewService:
    """Operations sur les critiques avec relance sur erreur transitoire."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        max_attempts: int = 3,
        max_wait: float = 2.0,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts
        self._max_wait = max_wait

    async def _retry(self, operation):
        return await run_with_retry(operation, self._max_attempts, self._max_wait)

    async def create(self, review: Review) -> Review:
        """
        Cree une critique sur un film, une serie, une saison ou un episode.

        Raises:
            InvalidArgumentError: ID mal forme, type de cible inconnu, note hors de [0, 5]
            NotFoundError: auteur ou cible absent
        """
        ensure_valid_id(review.user_id, "user")
        ensure_valid_id(review.target_id, "target")
        target_type = normalize_enum(review.target_type, ReviewTargetType)
        review.target_type = target_type.value
        review.rating = ensure_valid_rating(review.rating)
        review.id = new_id()

        async def attempt() -> Review:
            async with transactional(self._uow_factory, "create review") as uow:
                if await uow.users.get_by_id(review.user_id) is None:
                    raise NotFoundError("User", review.user_id)
                await _ensure_target_exists(uow, target_type, review.target_id)
                return await uow.reviews.add(review)

        created = await self._retry(attempt)
        logger.info("Critique creee", review_id=created.id, target_id=created.target_id)
        return created

    async def get(self, review_id: str) -> Review:
        ensure_valid_id(review_id, "review")

        async def attempt() -> Review:
            async with transactional(self._uow_factory, "get review") as uow:
                review = await uow.reviews.get_by_id(review_id)
            if review is None:
                raise NotFoundError("Review", review_id)
            return review

        return await self._retry(attempt)

    async def list_reviews(self) -> list[Review]:
        """Toutes les critiques, plus recentes d'abord."""
        return await self.find_by_filter(ReviewFilter())

    async def find_by_filter(self, criteria: ReviewFilter) -> list[Review]:
        """Critiques correspondant a tous les criteres renseignes."""
        if criteria.target_id is not None:
            ensure_valid_id(criteria.target_id, "target")
        if criteria.user_id is not None:
            ensure_valid_id(criteria.user_id, "user")
        if criteria.target_type is not None:
            criteria = ReviewFilter(
                target_id=criteria.target_id,
                target_type=normalize_enum(criteria.target_type, ReviewTargetType).value,
                user_id=criteria.user_id,
                rating=criteria.rating,
            )
        if criteria.rating is not None:
            ensure_valid_rating(criteria.rating)

        async def attempt() -> list[Review]:
            async with transactional(self._uow_factory, "find reviews") as uow:
                return await uow.reviews.find(criteria)

        return await self._retry(attempt)

    async def update(
        self,
        review_id: str,
        rating: Optional[float] = None,
        content: Optional[str] = None,
    ) -> Review:
        """Met a jour la note et/ou le commentaire."""
        ensure_valid_id(review_id, "review")
        if rating is not None:
            rating = ensure_valid_rating(rating)

        async def attempt() -> Review:
            async with transactional(self._uow_factory, "update review") as uow:
                review = await uow.reviews.get_by_id(review_id)
                if review is None:
                    raise NotFoundError("Review", review_id)
                if rating is not None:
                    review.rating = rating
                if content is not None:
                    review.content = content
                return await uow.reviews.update(review)

        return await self._retry(attempt)

    async def delete(self, review_id: str) -> None:
        ensure_valid_id(review_id, "review")

        async def attempt() -> None:
            async with transactional(self._uow_factory, "delete review") as uow:
                if not await uow.reviews.delete(review_id):
                    raise NotFoundError("Review", review_id)

        await self._retry(attempt)
        logger.info("Critique supprimee", review_id=review_id)


async def _ensure_target_exists(
    uow: IUnitOfWork, target_type: ReviewTargetType, target_id: str
) -> None:
    repositories = {
        ReviewTargetType.MOVIE: uow.movies,
        ReviewTargetType.TV_SHOW: uow.tv_shows,
        ReviewTargetType.SEASON: uow.seasons,
        ReviewTargetType.EPISODE: uow.episodes,
    }
    if await repositories[target_type].get_by_id(target_id) is None:
        raise NotFoundError(target_type.value, target_id)
