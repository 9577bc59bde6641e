"""
Tests du service Review.

Ces tests verifient:
- La verification de l'auteur et de la cible (film, serie, saison, episode)
- Le filtrage par criteres
- La relance sur erreur transitoire du stockage
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from moviebox.core.entities.media import Movie, TvShow
from moviebox.core.entities.social import Review, User
from moviebox.core.errors import InternalError, InvalidArgumentError, NotFoundError
from moviebox.core.value_objects import new_id
from moviebox.core.value_objects.filters import ReviewFilter
from moviebox.infrastructure.persistence.repositories import SQLModelReviewRepository


def _locked() -> OperationalError:
    return OperationalError("INSERT INTO reviews", {}, Exception("database is locked"))


class TestCreateReview:
    """Tests pour la creation de critiques."""

    @pytest.mark.asyncio
    async def test_create_on_movie(self, review_service, alice: User, movie: Movie) -> None:
        review = await review_service.create(
            Review(target_id=movie.id, target_type="movie", user_id=alice.id, rating=4, content="Great")
        )

        assert review.target_type == "Movie"
        assert review.rating == 4.0
        assert (await review_service.get(review.id)).content == "Great"

    @pytest.mark.asyncio
    async def test_target_must_exist(self, review_service, alice: User) -> None:
        with pytest.raises(NotFoundError, match="TvShow with ID"):
            await review_service.create(
                Review(target_id=new_id(), target_type="TvShow", user_id=alice.id, rating=3)
            )

    @pytest.mark.asyncio
    async def test_author_must_exist(self, review_service, tv_show: TvShow) -> None:
        with pytest.raises(NotFoundError, match="User with ID"):
            await review_service.create(
                Review(target_id=tv_show.id, target_type="TvShow", user_id=new_id(), rating=3)
            )

    @pytest.mark.asyncio
    async def test_unknown_target_type(self, review_service, alice: User) -> None:
        with pytest.raises(InvalidArgumentError):
            await review_service.create(
                Review(target_id=new_id(), target_type="Book", user_id=alice.id, rating=3)
            )

    @pytest.mark.asyncio
    async def test_rating_out_of_range(self, review_service, alice: User, movie: Movie) -> None:
        with pytest.raises(InvalidArgumentError):
            await review_service.create(
                Review(target_id=movie.id, target_type="Movie", user_id=alice.id, rating=7)
            )


class TestReviewQueries:
    """Filtrage, mise a jour et suppression."""

    @pytest.mark.asyncio
    async def test_find_by_filter(
        self, review_service, alice: User, bob: User, movie: Movie, tv_show: TvShow
    ) -> None:
        on_movie = await review_service.create(
            Review(target_id=movie.id, target_type="Movie", user_id=alice.id, rating=5)
        )
        await review_service.create(
            Review(target_id=tv_show.id, target_type="TvShow", user_id=alice.id, rating=5)
        )
        await review_service.create(
            Review(target_id=movie.id, target_type="Movie", user_id=bob.id, rating=2)
        )

        results = await review_service.find_by_filter(
            ReviewFilter(target_type="movie", user_id=alice.id)
        )

        assert [r.id for r in results] == [on_movie.id]
        assert len(await review_service.list_reviews()) == 3

    @pytest.mark.asyncio
    async def test_update_rating_and_content(
        self, review_service, alice: User, movie: Movie
    ) -> None:
        review = await review_service.create(
            Review(target_id=movie.id, target_type="Movie", user_id=alice.id, rating=2)
        )

        updated = await review_service.update(review.id, rating=4.5, content="Better on rewatch")

        assert updated.rating == 4.5
        assert updated.content == "Better on rewatch"

    @pytest.mark.asyncio
    async def test_delete_then_get_raises_not_found(
        self, review_service, alice: User, movie: Movie
    ) -> None:
        review = await review_service.create(
            Review(target_id=movie.id, target_type="Movie", user_id=alice.id, rating=2)
        )

        await review_service.delete(review.id)

        with pytest.raises(NotFoundError):
            await review_service.get(review.id)


class TestReviewRetry:
    """Relance sur erreur transitoire."""

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(
        self, review_service, alice: User, movie: Movie
    ) -> None:
        original = SQLModelReviewRepository.add
        calls = 0

        async def flaky_add(repository, review):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise _locked()
            return await original(repository, review)

        with patch.object(SQLModelReviewRepository, "add", flaky_add):
            review = await review_service.create(
                Review(target_id=movie.id, target_type="Movie", user_id=alice.id, rating=3)
            )

        assert calls == 2
        assert (await review_service.get(review.id)).rating == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_surface_the_error(
        self, review_service, alice: User, movie: Movie
    ) -> None:
        failing = AsyncMock(side_effect=_locked())
        with patch.object(SQLModelReviewRepository, "add", failing):
            with pytest.raises(InternalError, match="Failed to create review"):
                await review_service.create(
                    Review(target_id=movie.id, target_type="Movie", user_id=alice.id, rating=3)
                )

        assert failing.await_count == 3
