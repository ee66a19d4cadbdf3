from fastapi import APIRouter, status, Depends, Path, Query
from typing import List

from ....schemas.rating import Rating, RatingCreate
from ....services.profile_service import AuthUser
from ....services.rating_service import RatingService
from ..deps import get_current_user, get_rating_service, unwrap

router = APIRouter(tags=["ratings"])

@router.post("/", response_model=Rating, status_code=status.HTTP_201_CREATED)
async def create_rating(
    rating: RatingCreate,
    current_user: AuthUser = Depends(get_current_user),
    ratings: RatingService = Depends(get_rating_service)
):
    """
    Rate the other party after a completed swap.
    """
    return unwrap(await ratings.add_rating(
        rating.swap_request_id,
        current_user.id,
        rating.rating,
        comment=rating.comment,
        to_user_id=rating.to_user_id
    ))

@router.get("/", response_model=List[Rating])
async def get_my_ratings(
    current_user: AuthUser = Depends(get_current_user),
    ratings: RatingService = Depends(get_rating_service)
):
    """
    Get ratings the current user has given or received, newest first.
    """
    return await ratings.list_ratings(current_user.id)

@router.get("/user/{user_id}", response_model=List[Rating])
async def get_user_ratings(
    user_id: str = Path(...),
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    ratings: RatingService = Depends(get_rating_service)
):
    """
    Get the ratings a user has received.
    """
    received = await ratings.ratings_received(user_id)

    # Skip the first 'skip' ratings
    return received[skip:skip + limit]
