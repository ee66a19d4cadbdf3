from typing import Any, Dict, List, Optional
from supabase import Client

from ..core.supabase import execute_query
from ..schemas.swap import SwapStatus
from .store import SkillSwapStore

class SupabaseStore(SkillSwapStore):
    """Store backed by the hosted Supabase tables."""

    name = "supabase"

    def __init__(self, client: Client):
        self.client = client

    @staticmethod
    def _party_filter(first: str, second: str, user_id: str) -> str:
        return f"{first}.eq.{user_id},{second}.eq.{user_id}"

    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        rows = await execute_query(
            self.client,
            table="profiles",
            query_type="select",
            filters={"id": user_id},
            limit=1
        )
        return rows[0] if rows else None

    async def upsert_profile(self, data: Dict[str, Any]) -> Dict[str, Any]:
        rows = await execute_query(
            self.client,
            table="profiles",
            query_type="upsert",
            data=data
        )
        return rows[0]

    async def list_public_profiles(self) -> List[Dict[str, Any]]:
        return await execute_query(
            self.client,
            table="profiles",
            query_type="select",
            filters={"is_public": True},
            order_by={"created_at": "desc"}
        )

    async def update_profile_rating(
        self,
        user_id: str,
        rating: float,
        total_ratings: int
    ) -> Optional[Dict[str, Any]]:
        rows = await execute_query(
            self.client,
            table="profiles",
            query_type="update",
            filters={"id": user_id},
            data={"rating": rating, "total_ratings": total_ratings}
        )
        return rows[0] if rows else None

    async def get_swap_request(self, request_id: str) -> Optional[Dict[str, Any]]:
        rows = await execute_query(
            self.client,
            table="swap_requests",
            query_type="select",
            filters={"id": request_id},
            limit=1
        )
        return rows[0] if rows else None

    async def list_swap_requests(self, user_id: str) -> List[Dict[str, Any]]:
        return await execute_query(
            self.client,
            table="swap_requests",
            query_type="select",
            or_filter=self._party_filter("from_user_id", "to_user_id", user_id),
            order_by={"created_at": "desc"}
        )

    async def insert_swap_request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        rows = await execute_query(
            self.client,
            table="swap_requests",
            query_type="insert",
            data={"status": SwapStatus.PENDING.value, **data}
        )
        return rows[0]

    async def update_swap_request(
        self,
        request_id: str,
        data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        rows = await execute_query(
            self.client,
            table="swap_requests",
            query_type="update",
            filters={"id": request_id},
            data=data
        )
        return rows[0] if rows else None

    async def delete_swap_request(self, request_id: str) -> bool:
        rows = await execute_query(
            self.client,
            table="swap_requests",
            query_type="delete",
            filters={"id": request_id}
        )
        return len(rows) > 0

    async def list_ratings(self, user_id: str) -> List[Dict[str, Any]]:
        return await execute_query(
            self.client,
            table="ratings",
            query_type="select",
            or_filter=self._party_filter("from_user_id", "to_user_id", user_id),
            order_by={"created_at": "desc"}
        )

    async def find_ratings(self, swap_request_id: str, from_user_id: str) -> List[Dict[str, Any]]:
        return await execute_query(
            self.client,
            table="ratings",
            query_type="select",
            filters={"swap_request_id": swap_request_id, "from_user_id": from_user_id}
        )

    async def insert_rating(self, data: Dict[str, Any]) -> Dict[str, Any]:
        rows = await execute_query(
            self.client,
            table="ratings",
            query_type="insert",
            data=data
        )
        return rows[0]
