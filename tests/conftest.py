"""
Shared fixtures: test settings, an in-memory store, services and an app
wired to them.
"""

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from skillswap.core.config import Settings
from skillswap.core.events import ChangeBus
from skillswap.core.security import create_access_token
from skillswap.main import create_app
from skillswap.schemas.profile import Profile
from skillswap.services.profile_service import ProfileService
from skillswap.services.rating_service import RatingService
from skillswap.services.store_memory import MemoryStore
from skillswap.services.swap_service import SwapRequestService


# ============ Helpers ============

def make_profile(
    user_id: str,
    offered: List[str],
    wanted: List[str],
    name: Optional[str] = None,
    is_public: bool = True,
) -> Profile:
    return Profile(
        id=user_id,
        name=name or user_id.upper(),
        skills_offered=offered,
        skills_wanted=wanted,
        is_public=is_public,
    )


async def seed_profile(
    store: MemoryStore,
    user_id: str,
    offered: List[str],
    wanted: List[str],
    name: Optional[str] = None,
    is_public: bool = True,
) -> Profile:
    row = await store.upsert_profile({
        "id": user_id,
        "name": name or user_id.upper(),
        "skills_offered": offered,
        "skills_wanted": wanted,
        "is_public": is_public,
    })
    return Profile(**row)


async def seed_pair(store: MemoryStore):
    """U1 offers React and wants Python; U2 the reverse."""
    u1 = await seed_profile(store, "u1", ["React"], ["Python"], name="Alex")
    u2 = await seed_profile(store, "u2", ["Python"], ["React"], name="Sarah")
    return u1, u2


# ============ Fixtures ============

@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        store_backend="memory",
        supabase_jwt_secret="test-secret",
        unique_ratings=True,
        maintain_rating_aggregate=True,
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def bus() -> ChangeBus:
    return ChangeBus()


@pytest.fixture
def profile_service(store) -> ProfileService:
    return ProfileService(store)


@pytest.fixture
def swap_service(store, bus) -> SwapRequestService:
    return SwapRequestService(store, bus)


@pytest.fixture
def rating_service(store, bus) -> RatingService:
    return RatingService(store, bus)


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(settings):
    def _headers(user_id: str, email: Optional[str] = None, name: Optional[str] = None) -> dict:
        token = create_access_token(settings, user_id, email=email, name=name)
        return {"Authorization": f"Bearer {token}"}
    return _headers
