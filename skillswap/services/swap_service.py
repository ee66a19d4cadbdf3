import logging
from typing import List

from ..core.events import SWAP_REQUESTS, ChangeBus
from ..core.exceptions import (
    NotFoundError,
    Outcome,
    PermissionDenied,
    SkillSwapError,
)
from ..schemas.swap import SwapRequest, SwapRequestCreate, SwapStatus
from .lifecycle import check_delete, check_transition, transition_changes, validate_new_request
from .store import SkillSwapStore

logger = logging.getLogger(__name__)


def received_requests(requests: List[SwapRequest], user_id: str) -> List[SwapRequest]:
    """Requests addressed to the user, without the ones already rejected."""
    return [
        r for r in requests
        if r.to_user_id == user_id and r.status != SwapStatus.REJECTED
    ]


def sent_requests(requests: List[SwapRequest], user_id: str) -> List[SwapRequest]:
    return [r for r in requests if r.from_user_id == user_id]


class SwapRequestService:
    """
    Creates swap requests and applies status transitions.

    Every mutating method returns an Outcome. Validation runs before the
    store is touched; a successful change notifies both parties on the
    change bus.
    """

    def __init__(self, store: SkillSwapStore, bus: ChangeBus):
        self.store = store
        self.bus = bus

    async def list_requests(self, user_id: str) -> List[SwapRequest]:
        rows = await self.store.list_swap_requests(user_id)
        return [SwapRequest(**row) for row in rows]

    async def _load(self, request_id: str) -> SwapRequest:
        row = await self.store.get_swap_request(request_id)
        if row is None:
            raise NotFoundError("Swap request not found")
        return SwapRequest(**row)

    async def get_request(self, request_id: str, user_id: str) -> Outcome[SwapRequest]:
        try:
            request = await self._load(request_id)
            if not request.involves(user_id):
                raise PermissionDenied("You don't have permission to view this swap request")
            return Outcome.ok(request)
        except SkillSwapError as e:
            return Outcome.from_error(e)

    async def _notify(self, request: SwapRequest) -> None:
        await self.bus.publish(SWAP_REQUESTS, [request.from_user_id, request.to_user_id])

    async def send_request(self, requester_id: str, payload: SwapRequestCreate) -> Outcome[SwapRequest]:
        try:
            row = validate_new_request(requester_id, payload)

            if await self.store.get_profile(requester_id) is None:
                raise NotFoundError("Create your profile before sending swap requests")

            recipient = await self.store.get_profile(payload.to_user_id)
            if recipient is None:
                raise NotFoundError("Recipient not found")

            created = SwapRequest(**await self.store.insert_swap_request(row))
        except SkillSwapError as e:
            logger.warning(f"Swap request from {requester_id} refused: {e.detail}")
            return Outcome.from_error(e)

        logger.info(f"Swap request {created.id} created: {created.from_user_id} -> {created.to_user_id}")
        await self._notify(created)
        return Outcome.ok(created)

    async def update_status(self, request_id: str, actor_id: str, status: SwapStatus) -> Outcome[SwapRequest]:
        try:
            request = await self._load(request_id)
            check_transition(request, actor_id, status)

            row = await self.store.update_swap_request(request_id, transition_changes(status))
            if row is None:
                raise NotFoundError("Swap request not found")
            updated = SwapRequest(**row)
        except SkillSwapError as e:
            logger.warning(f"Status change of {request_id} to {status.value} by {actor_id} refused: {e.detail}")
            return Outcome.from_error(e)

        logger.info(f"Swap request {request_id}: {request.status.value} -> {updated.status.value}")
        await self._notify(updated)
        return Outcome.ok(updated)

    async def accept(self, request_id: str, actor_id: str) -> Outcome[SwapRequest]:
        return await self.update_status(request_id, actor_id, SwapStatus.ACCEPTED)

    async def reject(self, request_id: str, actor_id: str) -> Outcome[SwapRequest]:
        return await self.update_status(request_id, actor_id, SwapStatus.REJECTED)

    async def complete(self, request_id: str, actor_id: str) -> Outcome[SwapRequest]:
        return await self.update_status(request_id, actor_id, SwapStatus.COMPLETED)

    async def delete_request(self, request_id: str, actor_id: str) -> Outcome[SwapRequest]:
        try:
            request = await self._load(request_id)
            check_delete(request, actor_id)

            if not await self.store.delete_swap_request(request_id):
                raise NotFoundError("Swap request not found")
        except SkillSwapError as e:
            logger.warning(f"Delete of {request_id} by {actor_id} refused: {e.detail}")
            return Outcome.from_error(e)

        logger.info(f"Swap request {request_id} deleted by requester")
        await self._notify(request)
        return Outcome.ok(request)
