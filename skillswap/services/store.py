"""
Store abstraction

The hosted backend owns persistence, uniqueness and timestamps. Services
talk to it through this interface so the Supabase backend and the
in-memory backend are interchangeable.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..core.config import Settings

logger = logging.getLogger(__name__)


class SkillSwapStore(ABC):
    """
    Abstract store for profiles, swap requests and ratings.

    Every method raises StoreError when the backend call fails. Reads of a
    single row return None when the row does not exist.
    """

    name = "abstract"

    # ---- profiles ----

    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    async def upsert_profile(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert or update a profile keyed by ``data["id"]``."""
        pass

    @abstractmethod
    async def list_public_profiles(self) -> List[Dict[str, Any]]:
        """Public profiles, newest first."""
        pass

    @abstractmethod
    async def update_profile_rating(
        self,
        user_id: str,
        rating: float,
        total_ratings: int
    ) -> Optional[Dict[str, Any]]:
        pass

    # ---- swap requests ----

    @abstractmethod
    async def get_swap_request(self, request_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    async def list_swap_requests(self, user_id: str) -> List[Dict[str, Any]]:
        """Requests where the user is requester or recipient, newest first."""
        pass

    @abstractmethod
    async def insert_swap_request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def update_swap_request(
        self,
        request_id: str,
        data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    async def delete_swap_request(self, request_id: str) -> bool:
        """Returns True if a row was removed."""
        pass

    # ---- ratings ----

    @abstractmethod
    async def list_ratings(self, user_id: str) -> List[Dict[str, Any]]:
        """Ratings given or received by the user, newest first."""
        pass

    @abstractmethod
    async def find_ratings(self, swap_request_id: str, from_user_id: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def insert_rating(self, data: Dict[str, Any]) -> Dict[str, Any]:
        pass


def create_store(settings: Settings) -> SkillSwapStore:
    """
    Build the store selected by ``settings.store_backend``.

    Raises:
        ValueError: Unknown backend or missing Supabase configuration
    """
    backend = settings.store_backend.lower()

    if backend == "memory":
        from .store_memory import MemoryStore
        logger.info("Using in-memory store")
        return MemoryStore()

    if backend == "supabase":
        from .store_supabase import SupabaseStore
        from ..core.supabase import get_supabase_client
        logger.info("Using Supabase store")
        return SupabaseStore(get_supabase_client(settings))

    raise ValueError(f"Unknown store backend: {settings.store_backend}")
