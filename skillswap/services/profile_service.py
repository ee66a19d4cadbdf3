import logging
from typing import List, Optional

from pydantic import BaseModel

from ..core.exceptions import NotFoundError, Outcome, SkillSwapError
from ..schemas.profile import Profile, ProfileUpdate
from .matching import SkillMatch, match_skills, search_profiles
from .store import SkillSwapStore

logger = logging.getLogger(__name__)


class AuthUser(BaseModel):
    """Identity taken from a verified access token."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


def default_display_name(user: AuthUser) -> str:
    if user.name:
        return user.name
    if user.email:
        return user.email.split("@")[0]
    return "User"


class ProfileService:
    def __init__(self, store: SkillSwapStore):
        self.store = store

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        row = await self.store.get_profile(user_id)
        return Profile(**row) if row else None

    async def get_or_create_profile(self, user: AuthUser) -> Profile:
        """
        Return the user's profile, creating the default one on first login.

        A missing profile is not an error. StoreError propagates.
        """
        profile = await self.get_profile(user.id)
        if profile is not None:
            return profile

        logger.info(f"No profile for {user.id}, creating default profile")
        row = await self.store.upsert_profile({
            "id": user.id,
            "name": default_display_name(user),
            "location": None,
            "skills_offered": [],
            "skills_wanted": [],
            "availability": [],
            "is_public": True,
            "rating": 0,
            "total_ratings": 0,
            "avatar_url": None,
        })
        return Profile(**row)

    async def update_profile(self, user: AuthUser, update: ProfileUpdate) -> Outcome[Profile]:
        """Apply the owner's changes. Rating fields are not writable here."""
        try:
            current = await self.get_or_create_profile(user)
            changes = update.model_dump(mode="json", exclude_unset=True)
            if "name" in changes and changes["name"] is None:
                del changes["name"]

            row = await self.store.upsert_profile({"id": current.id, "name": current.name, **changes})
        except SkillSwapError as e:
            logger.warning(f"Profile update for {user.id} failed: {e.detail}")
            return Outcome.from_error(e)

        return Outcome.ok(Profile(**row))

    async def list_public_profiles(self) -> List[Profile]:
        rows = await self.store.list_public_profiles()
        return [Profile(**row) for row in rows]

    async def browse(self, viewer_id: str, term: str = "") -> List[Profile]:
        return search_profiles(await self.list_public_profiles(), viewer_id, term)

    async def get_public_profile(self, user_id: str, viewer_id: Optional[str] = None) -> Profile:
        """
        Raises:
            NotFoundError: No such profile, or it is private and not the viewer's
        """
        profile = await self.get_profile(user_id)
        if profile is None or (not profile.is_public and profile.id != viewer_id):
            raise NotFoundError("User not found")
        return profile

    async def matches_with(self, viewer: Profile, target_id: str) -> SkillMatch:
        target = await self.get_public_profile(target_id, viewer.id)
        return match_skills(viewer, target)
