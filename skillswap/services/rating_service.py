import logging
from typing import List, Optional

from ..core.events import RATINGS, ChangeBus
from ..core.exceptions import (
    NotFoundError,
    Outcome,
    PermissionDenied,
    SkillSwapError,
    StoreError,
    ValidationFailure,
)
from ..schemas.rating import MAX_COMMENT_LENGTH, Rating
from ..schemas.swap import SwapRequest, SwapStatus
from .store import SkillSwapStore

logger = logging.getLogger(__name__)


def running_average(old_average: float, old_count: int, new_score: int) -> float:
    """Mean after adding ``new_score`` to ``old_count`` scores averaging ``old_average``."""
    if old_count < 0:
        raise ValueError("Rating count cannot be negative")
    return (old_average * old_count + new_score) / (old_count + 1)


def check_rating(
    request: SwapRequest,
    from_user_id: str,
    to_user_id: str,
    score: int,
    comment: str = ""
) -> None:
    """
    Validate a rating against the swap request it evaluates.

    Raises:
        PermissionDenied: The rater is not a party to the request
        ValidationFailure: Wrong status, bad rated user, score or comment
    """
    if not request.involves(from_user_id):
        raise PermissionDenied("You don't have permission to rate this swap")

    if not request.involves(to_user_id):
        raise ValidationFailure("The rated user must be a party to the swap")

    if from_user_id == to_user_id:
        raise ValidationFailure("You cannot rate yourself")

    if request.status != SwapStatus.COMPLETED:
        raise ValidationFailure("You can only rate completed swaps")

    if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
        raise ValidationFailure("Rating must be a whole number from 1 to 5")

    if len(comment or "") > MAX_COMMENT_LENGTH:
        raise ValidationFailure(f"Comment must be at most {MAX_COMMENT_LENGTH} characters")


class RatingService:
    """
    Records ratings for completed swaps.

    Args:
        store: Backend store
        bus: Change bus notified after a rating is recorded
        unique_ratings: Refuse a second rating by the same rater for the same request
        maintain_aggregate: Update the rated profile's average and count
    """

    def __init__(
        self,
        store: SkillSwapStore,
        bus: ChangeBus,
        unique_ratings: bool = True,
        maintain_aggregate: bool = True
    ):
        self.store = store
        self.bus = bus
        self.unique_ratings = unique_ratings
        self.maintain_aggregate = maintain_aggregate

    async def list_ratings(self, user_id: str) -> List[Rating]:
        rows = await self.store.list_ratings(user_id)
        return [Rating(**row) for row in rows]

    async def ratings_received(self, user_id: str) -> List[Rating]:
        return [r for r in await self.list_ratings(user_id) if r.to_user_id == user_id]

    async def add_rating(
        self,
        swap_request_id: str,
        from_user_id: str,
        score: int,
        comment: str = "",
        to_user_id: Optional[str] = None
    ) -> Outcome[Rating]:
        try:
            row = await self.store.get_swap_request(swap_request_id)
            if row is None:
                raise NotFoundError("Swap request not found")
            request = SwapRequest(**row)

            if to_user_id is None:
                to_user_id = request.other_party(from_user_id)

            check_rating(request, from_user_id, to_user_id, score, comment)

            if await self.store.get_profile(to_user_id) is None:
                raise NotFoundError("Rated user not found")

            if self.unique_ratings and await self.store.find_ratings(swap_request_id, from_user_id):
                raise ValidationFailure("You have already rated this swap")

            rating = Rating(**await self.store.insert_rating({
                "swap_request_id": swap_request_id,
                "from_user_id": from_user_id,
                "to_user_id": to_user_id,
                "rating": score,
                "comment": comment or "",
            }))
        except SkillSwapError as e:
            logger.warning(f"Rating of {swap_request_id} by {from_user_id} refused: {e.detail}")
            return Outcome.from_error(e)

        if self.maintain_aggregate:
            try:
                await self.refresh_aggregate(to_user_id)
            except StoreError as e:
                # The rating is stored; the next rating or refresh recomputes the aggregate
                logger.error(f"Aggregate for {to_user_id} not updated after rating {rating.id}: {e.detail}")

        logger.info(f"Rating {rating.id} recorded: {from_user_id} -> {to_user_id} ({score})")
        await self.bus.publish(RATINGS, [from_user_id, to_user_id])
        return Outcome.ok(rating)

    async def refresh_aggregate(self, user_id: str) -> None:
        """
        Recompute a profile's average and count from every rating it has received.

        The result depends only on the stored rows, so concurrent raters
        converge on the same value.
        """
        average, count = 0.0, 0
        for received in await self.ratings_received(user_id):
            average = running_average(average, count, received.rating)
            count += 1
        await self.store.update_profile_rating(user_id, average, count)
