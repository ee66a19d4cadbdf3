from fastapi import APIRouter, status, Depends, Path, Query
from typing import List, Optional

from ....schemas.swap import SwapRequest, SwapRequestCreate, SwapRequestUpdate
from ....services.profile_service import AuthUser, ProfileService
from ....services.swap_service import SwapRequestService, received_requests, sent_requests
from ..deps import get_current_user, get_profile_service, get_swap_service, unwrap

router = APIRouter(tags=["swaps"])

@router.post("/", response_model=SwapRequest, status_code=status.HTTP_201_CREATED)
async def create_swap_request(
    swap: SwapRequestCreate,
    current_user: AuthUser = Depends(get_current_user),
    swaps: SwapRequestService = Depends(get_swap_service),
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    Send a swap request to another user.

    The request starts as pending. Sending a request to yourself is refused.
    """
    # The requester needs a profile so the other party can rate them later
    await profiles.get_or_create_profile(current_user)
    return unwrap(await swaps.send_request(current_user.id, swap))

@router.get("/", response_model=List[SwapRequest])
async def get_swaps(
    role: Optional[str] = Query(None, pattern="^(received|sent)$"),
    current_user: AuthUser = Depends(get_current_user),
    swaps: SwapRequestService = Depends(get_swap_service)
):
    """
    Get the current user's swap requests, newest first.

    ``role=received`` hides rejected requests; ``role=sent`` lists outgoing ones.
    """
    requests = await swaps.list_requests(current_user.id)

    if role == "received":
        return received_requests(requests, current_user.id)
    if role == "sent":
        return sent_requests(requests, current_user.id)
    return requests

@router.get("/{swap_id}", response_model=SwapRequest)
async def get_swap(
    swap_id: str = Path(...),
    current_user: AuthUser = Depends(get_current_user),
    swaps: SwapRequestService = Depends(get_swap_service)
):
    return unwrap(await swaps.get_request(swap_id, current_user.id))

@router.patch("/{swap_id}", response_model=SwapRequest)
async def update_swap_status(
    swap_update: SwapRequestUpdate,
    swap_id: str = Path(...),
    current_user: AuthUser = Depends(get_current_user),
    swaps: SwapRequestService = Depends(get_swap_service)
):
    """
    Update a swap status (accept, reject, complete).

    Only the recipient can accept or reject a pending request. Either party
    can complete an accepted one.
    """
    return unwrap(await swaps.update_status(swap_id, current_user.id, swap_update.status))

@router.delete("/{swap_id}", response_model=SwapRequest)
async def delete_swap(
    swap_id: str = Path(...),
    current_user: AuthUser = Depends(get_current_user),
    swaps: SwapRequestService = Depends(get_swap_service)
):
    """
    Withdraw a pending request. Only the requester can do this.
    """
    return unwrap(await swaps.delete_request(swap_id, current_user.id))
