"""Tests for rating rules and the aggregate rating."""

import pytest

from skillswap.core.exceptions import ErrorKind, StoreError
from skillswap.schemas.swap import SwapRequestCreate
from skillswap.services.rating_service import RatingService, running_average
from skillswap.services.store_memory import MemoryStore
from skillswap.services.swap_service import SwapRequestService

from conftest import seed_pair, seed_profile


async def completed_request(store, swap_service):
    await seed_pair(store)
    sent = await swap_service.send_request("u1", SwapRequestCreate(
        to_user_id="u2", skill_offered="React", skill_wanted="Python", message="let's swap"
    ))
    await swap_service.accept(sent.data.id, "u2")
    await swap_service.complete(sent.data.id, "u2")
    return sent.data


class TestRunningAverage:

    def test_first_rating(self):
        assert running_average(0, 0, 5) == 5

    def test_adds_to_existing_mean(self):
        assert running_average(4.0, 2, 1) == pytest.approx(3.0)
        assert running_average(4.5, 4, 3) == pytest.approx(4.2)

    def test_negative_count_is_rejected(self):
        with pytest.raises(ValueError):
            running_average(3.0, -1, 4)


class TestAddRating:

    @pytest.mark.asyncio
    async def test_scenario_rating(self, store, swap_service, rating_service):
        request = await completed_request(store, swap_service)

        outcome = await rating_service.add_rating(request.id, "u1", 5, comment="great teacher")

        assert outcome.success
        rating = outcome.data
        assert rating.swap_request_id == request.id
        assert rating.from_user_id == "u1"
        assert rating.to_user_id == "u2"
        assert rating.rating == 5
        assert rating.comment == "great teacher"

        rated = await store.get_profile("u2")
        assert rated["rating"] == 5
        assert rated["total_ratings"] == 1

    @pytest.mark.asyncio
    async def test_both_parties_can_rate(self, store, swap_service, rating_service):
        request = await completed_request(store, swap_service)

        first = await rating_service.add_rating(request.id, "u1", 4)
        second = await rating_service.add_rating(request.id, "u2", 2)

        assert first.success and second.success
        assert second.data.to_user_id == "u1"
        assert len(await rating_service.list_ratings("u1")) == 2
        assert [r.from_user_id for r in await rating_service.ratings_received("u1")] == ["u2"]

    @pytest.mark.asyncio
    async def test_duplicate_rating_is_refused(self, store, swap_service, rating_service):
        request = await completed_request(store, swap_service)
        await rating_service.add_rating(request.id, "u1", 5)

        outcome = await rating_service.add_rating(request.id, "u1", 1)

        assert outcome.error == ErrorKind.VALIDATION
        assert len(store.ratings) == 1
        assert (await store.get_profile("u2"))["total_ratings"] == 1

    @pytest.mark.asyncio
    async def test_duplicates_allowed_when_not_unique(self, store, bus, swap_service):
        request = await completed_request(store, swap_service)
        service = RatingService(store, bus, unique_ratings=False)

        await service.add_rating(request.id, "u1", 5)
        outcome = await service.add_rating(request.id, "u1", 3)

        assert outcome.success
        assert len(store.ratings) == 2
        rated = await store.get_profile("u2")
        assert rated["rating"] == pytest.approx(4.0)
        assert rated["total_ratings"] == 2

    @pytest.mark.asyncio
    async def test_aggregate_left_alone_when_disabled(self, store, bus, swap_service):
        request = await completed_request(store, swap_service)
        service = RatingService(store, bus, maintain_aggregate=False)

        outcome = await service.add_rating(request.id, "u1", 5)

        assert outcome.success
        rated = await store.get_profile("u2")
        assert rated["rating"] == 0
        assert rated["total_ratings"] == 0

    @pytest.mark.asyncio
    async def test_only_completed_requests_can_be_rated(self, store, swap_service, rating_service):
        await seed_pair(store)
        sent = await swap_service.send_request("u1", SwapRequestCreate(
            to_user_id="u2", skill_offered="React", skill_wanted="Python", message="let's swap"
        ))
        await swap_service.accept(sent.data.id, "u2")

        outcome = await rating_service.add_rating(sent.data.id, "u1", 5)

        assert outcome.error == ErrorKind.VALIDATION
        assert store.ratings == {}

    @pytest.mark.asyncio
    async def test_outsider_cannot_rate(self, store, swap_service, rating_service):
        request = await completed_request(store, swap_service)
        await seed_profile(store, "u3", [], [])

        outcome = await rating_service.add_rating(request.id, "u3", 5, to_user_id="u2")

        assert outcome.error == ErrorKind.FORBIDDEN

    @pytest.mark.asyncio
    async def test_rated_user_must_be_a_party(self, store, swap_service, rating_service):
        request = await completed_request(store, swap_service)
        await seed_profile(store, "u3", [], [])

        outcome = await rating_service.add_rating(request.id, "u1", 5, to_user_id="u3")

        assert outcome.error == ErrorKind.VALIDATION

    @pytest.mark.asyncio
    async def test_cannot_rate_yourself(self, store, swap_service, rating_service):
        request = await completed_request(store, swap_service)

        outcome = await rating_service.add_rating(request.id, "u1", 5, to_user_id="u1")

        assert outcome.error == ErrorKind.VALIDATION

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [0, 6, True])
    async def test_score_out_of_range(self, store, swap_service, rating_service, score):
        request = await completed_request(store, swap_service)

        outcome = await rating_service.add_rating(request.id, "u1", score)

        assert outcome.error == ErrorKind.VALIDATION

    @pytest.mark.asyncio
    async def test_unknown_request(self, rating_service):
        outcome = await rating_service.add_rating("missing", "u1", 5)
        assert outcome.error == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_rated_user_without_profile_stores_nothing(self, store, rating_service):
        await seed_profile(store, "u2", ["Python"], ["React"])
        row = await store.insert_swap_request({
            "from_user_id": "u1",
            "to_user_id": "u2",
            "skill_offered": "React",
            "skill_wanted": "Python",
            "message": "let's swap",
        })
        await store.update_swap_request(row["id"], {"status": "completed"})

        outcome = await rating_service.add_rating(row["id"], "u2", 4)

        assert outcome.error == ErrorKind.NOT_FOUND
        assert store.ratings == {}

        await seed_profile(store, "u1", ["React"], ["Python"])
        retry = await rating_service.add_rating(row["id"], "u2", 4)

        assert retry.success
        rated = await store.get_profile("u1")
        assert rated["rating"] == 4
        assert rated["total_ratings"] == 1


class FailingAggregateStore(MemoryStore):
    """Memory store whose profile rating update fails like a dropped connection."""

    async def update_profile_rating(self, user_id, rating, total_ratings):
        try:
            raise ConnectionError("connection reset")
        except ConnectionError as e:
            raise StoreError("Database update on profiles failed") from e


class TestAggregate:

    @pytest.mark.asyncio
    async def test_stale_aggregate_is_recomputed_from_rows(self, store, swap_service, rating_service):
        request = await completed_request(store, swap_service)
        # As left behind by two raters that both read the same count
        await store.update_profile_rating("u2", 1.0, 7)

        await rating_service.add_rating(request.id, "u1", 5)

        rated = await store.get_profile("u2")
        assert rated["rating"] == 5
        assert rated["total_ratings"] == 1

    @pytest.mark.asyncio
    async def test_refresh_counts_every_received_rating(self, store, swap_service, rating_service):
        request = await completed_request(store, swap_service)
        await store.insert_rating({
            "swap_request_id": request.id, "from_user_id": "u1", "to_user_id": "u2", "rating": 2, "comment": "",
        })
        await store.insert_rating({
            "swap_request_id": request.id, "from_user_id": "u1", "to_user_id": "u2", "rating": 4, "comment": "",
        })

        await rating_service.refresh_aggregate("u2")

        rated = await store.get_profile("u2")
        assert rated["rating"] == pytest.approx(3.0)
        assert rated["total_ratings"] == 2

    @pytest.mark.asyncio
    async def test_aggregate_failure_keeps_the_rating(self, bus):
        store = FailingAggregateStore()
        swaps = SwapRequestService(store, bus)
        request = await completed_request(store, swaps)

        outcome = await RatingService(store, bus).add_rating(request.id, "u1", 5)

        assert outcome.success
        assert len(store.ratings) == 1
