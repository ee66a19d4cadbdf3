"""
Per-user application state.

AppState is an immutable snapshot. The update functions return a new
snapshot and never modify the one they are given. A change notification
is handled by re-fetching the whole collection and swapping it in.
"""

from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from ..schemas.profile import Profile
from ..schemas.rating import Rating
from ..schemas.swap import DashboardSummary, SwapRequest, SwapStatus
from .store import SkillSwapStore

RECENT_ACTIVITY_LIMIT = 5


@dataclass(frozen=True)
class AppState:
    user_id: Optional[str] = None
    profile: Optional[Profile] = None
    requests: Tuple[SwapRequest, ...] = ()
    users: Tuple[Profile, ...] = ()
    ratings: Tuple[Rating, ...] = ()


def with_profile(state: AppState, profile: Optional[Profile]) -> AppState:
    return replace(state, profile=profile)


def with_requests(state: AppState, requests: Sequence[SwapRequest]) -> AppState:
    return replace(state, requests=tuple(requests))


def with_users(state: AppState, users: Sequence[Profile]) -> AppState:
    return replace(state, users=tuple(users))


def with_ratings(state: AppState, ratings: Sequence[Rating]) -> AppState:
    return replace(state, ratings=tuple(ratings))


async def refresh_requests(state: AppState, store: SkillSwapStore) -> AppState:
    rows = await store.list_swap_requests(state.user_id)
    return with_requests(state, [SwapRequest(**row) for row in rows])


async def refresh_users(state: AppState, store: SkillSwapStore) -> AppState:
    rows = await store.list_public_profiles()
    return with_users(state, [Profile(**row) for row in rows])


async def refresh_ratings(state: AppState, store: SkillSwapStore) -> AppState:
    rows = await store.list_ratings(state.user_id)
    return with_ratings(state, [Rating(**row) for row in rows])


async def load_state(store: SkillSwapStore, user_id: str) -> AppState:
    row = await store.get_profile(user_id)
    state = AppState(user_id=user_id, profile=Profile(**row) if row else None)
    state = await refresh_requests(state, store)
    state = await refresh_users(state, store)
    return await refresh_ratings(state, store)


def dashboard_summary(state: AppState) -> DashboardSummary:
    user_id = state.user_id
    mine = [r for r in state.requests if r.involves(user_id)]
    received = [r for r in mine if r.to_user_id == user_id]
    sent = [r for r in mine if r.from_user_id == user_id]

    recent = sorted(mine, key=lambda r: r.created_at, reverse=True)[:RECENT_ACTIVITY_LIMIT]

    return DashboardSummary(
        received_count=len(received),
        sent_count=len(sent),
        pending_received=sum(1 for r in received if r.status == SwapStatus.PENDING),
        completed_swaps=sum(1 for r in mine if r.status == SwapStatus.COMPLETED),
        recent_activity=recent,
        rating=state.profile.rating if state.profile else 0,
        total_ratings=state.profile.total_ratings if state.profile else 0,
    )
