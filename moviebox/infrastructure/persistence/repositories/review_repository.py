"""
Implementation SQLModel du repository Review.
"""

from typing import Optional

from sqlmodel import select

from moviebox.core.entities.social import Review
from moviebox.core.ports.repositories import IReviewRepository
from moviebox.core.value_objects.filters import ReviewFilter
from moviebox.core.value_objects.identifiers import new_id
from moviebox.infrastructure.persistence.models import ReviewModel
from moviebox.infrastructure.persistence.repositories.base import SQLModelRepository


class SQLModelReviewRepository(SQLModelRepository[ReviewModel], IReviewRepository):
    """Repository SQLModel pour les critiques."""

    model = ReviewModel
    entity_name = "Review"
    sortable_fields = frozenset({"created_at", "rating"})
    protected_fields = frozenset({"target_id", "target_type", "user_id"})

    def _to_entity(self, model: ReviewModel) -> Review:
        return Review(
            id=model.id,
            target_id=model.target_id,
            target_type=model.target_type,
            user_id=model.user_id,
            rating=model.rating,
            content=model.content,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Review) -> ReviewModel:
        return ReviewModel(
            id=entity.id or new_id(),
            target_id=entity.target_id,
            target_type=entity.target_type,
            user_id=entity.user_id,
            rating=entity.rating,
            content=entity.content,
        )

    async def get_by_id(self, review_id: str) -> Optional[Review]:
        model = await self._get_model(review_id)
        if model:
            return self._to_entity(model)
        return None

    async def add(self, review: Review) -> Review:
        model = await self._insert(
            self._to_model(review), f"Review with ID {review.id} already exists"
        )
        return self._to_entity(model)

    async def update(self, review: Review) -> Review:
        model = await self._update_from(
            review.id, self._to_model(review), f"Review {review.id} could not be updated"
        )
        return self._to_entity(model)

    async def find(self, criteria: ReviewFilter) -> list[Review]:
        statement = select(ReviewModel)
        if criteria.target_id:
            statement = statement.where(ReviewModel.target_id == criteria.target_id)
        if criteria.target_type:
            statement = statement.where(ReviewModel.target_type == criteria.target_type)
        if criteria.user_id:
            statement = statement.where(ReviewModel.user_id == criteria.user_id)
        if criteria.rating is not None:
            statement = statement.where(ReviewModel.rating == criteria.rating)
        statement = statement.order_by(*self._ordering("created_at", True))
        return [self._to_entity(model) for model in await self._all(statement)]
