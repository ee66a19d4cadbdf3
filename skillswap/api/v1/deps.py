import logging
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from ...core.config import Settings
from ...core.events import ChangeBus
from ...core.exceptions import ErrorKind, Outcome
from ...core.security import decode_access_token
from ...services.profile_service import AuthUser, ProfileService
from ...services.rating_service import RatingService
from ...services.store import SkillSwapStore
from ...services.swap_service import SwapRequestService

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/users/dev/token",
    description="Enter the Supabase access token directly (without 'Bearer' prefix)",
    scheme_name="JWT"
)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STORE: status.HTTP_502_BAD_GATEWAY,
}

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_store(request: Request) -> SkillSwapStore:
    return request.app.state.store

def get_bus(request: Request) -> ChangeBus:
    return request.app.state.bus

def get_profile_service(store: SkillSwapStore = Depends(get_store)) -> ProfileService:
    return ProfileService(store)

def get_swap_service(
    store: SkillSwapStore = Depends(get_store),
    bus: ChangeBus = Depends(get_bus)
) -> SwapRequestService:
    return SwapRequestService(store, bus)

def get_rating_service(
    store: SkillSwapStore = Depends(get_store),
    bus: ChangeBus = Depends(get_bus),
    settings: Settings = Depends(get_settings)
) -> RatingService:
    return RatingService(
        store,
        bus,
        unique_ratings=settings.unique_ratings,
        maintain_aggregate=settings.maintain_rating_aggregate
    )

def authenticate(settings: Settings, token: str) -> AuthUser:
    """
    Raises:
        HTTPException: 401 when the token cannot be verified
    """
    try:
        payload = decode_access_token(settings, token)
    except JWTError as e:
        logger.info(f"Rejected token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    metadata = payload.get("user_metadata") or {}
    return AuthUser(id=payload["sub"], email=payload.get("email"), name=metadata.get("name"))

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings)
) -> AuthUser:
    """Get the current authenticated user."""
    return authenticate(settings, token)

def unwrap(outcome: Outcome):
    """Return the outcome's data or raise the matching HTTPException."""
    if outcome.success:
        return outcome.data
    raise HTTPException(
        status_code=STATUS_BY_KIND.get(outcome.error, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=outcome.detail
    )
