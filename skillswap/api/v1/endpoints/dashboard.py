from fastapi import APIRouter, Depends

from ....schemas.swap import DashboardSummary
from ....services.app_state import dashboard_summary, load_state, with_profile
from ....services.profile_service import AuthUser, ProfileService
from ....services.store import SkillSwapStore
from ..deps import get_current_user, get_profile_service, get_store

router = APIRouter(tags=["dashboard"])

@router.get("/", response_model=DashboardSummary)
async def get_dashboard(
    current_user: AuthUser = Depends(get_current_user),
    store: SkillSwapStore = Depends(get_store),
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    Activity overview: request counts, completed swaps, the five most recent
    requests and the user's rating.
    """
    state = await load_state(store, current_user.id)
    if state.profile is None:
        state = with_profile(state, await profiles.get_or_create_profile(current_user))
    return dashboard_summary(state)
