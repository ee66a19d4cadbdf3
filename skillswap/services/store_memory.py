"""
In-memory store

Keeps profiles, swap requests and ratings in dictionaries. Intended for
local development, the demo script and tests; data does not survive a
restart and is not shared between processes.
"""

import asyncio
import copy
import itertools
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..schemas.swap import SwapStatus
from .store import SkillSwapStore


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryStore(SkillSwapStore):
    """
    Dictionary-backed store.

    Rows are returned as copies so callers cannot mutate stored state.
    Listing order is newest first, ties broken by insertion order.
    """

    name = "memory"

    def __init__(self):
        self.profiles: Dict[str, Dict[str, Any]] = {}
        self.swap_requests: Dict[str, Dict[str, Any]] = {}
        self.ratings: Dict[str, Dict[str, Any]] = {}
        self._sequence: Dict[str, int] = {}
        self._counter = itertools.count()
        self._lock = asyncio.Lock()

    def _track(self, row_id: str) -> None:
        self._sequence.setdefault(row_id, next(self._counter))

    def _newest_first(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        ordered = sorted(
            rows,
            key=lambda row: (row["created_at"], self._sequence.get(row["id"], 0)),
            reverse=True,
        )
        return [copy.deepcopy(row) for row in ordered]

    # ---- profiles ----

    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        row = self.profiles.get(user_id)
        return copy.deepcopy(row) if row else None

    async def upsert_profile(self, data: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            now = _now()
            existing = self.profiles.get(data["id"])
            if existing:
                existing.update(copy.deepcopy(data))
                existing["updated_at"] = now
                row = existing
            else:
                row = {
                    "location": None,
                    "skills_offered": [],
                    "skills_wanted": [],
                    "availability": [],
                    "is_public": True,
                    "rating": 0,
                    "total_ratings": 0,
                    "avatar_url": None,
                    **copy.deepcopy(data),
                    "created_at": now,
                    "updated_at": now,
                }
                self.profiles[row["id"]] = row
                self._track(row["id"])
            return copy.deepcopy(row)

    async def list_public_profiles(self) -> List[Dict[str, Any]]:
        return self._newest_first([p for p in self.profiles.values() if p.get("is_public")])

    async def update_profile_rating(
        self,
        user_id: str,
        rating: float,
        total_ratings: int
    ) -> Optional[Dict[str, Any]]:
        async with self._lock:
            row = self.profiles.get(user_id)
            if row is None:
                return None
            row.update({"rating": rating, "total_ratings": total_ratings, "updated_at": _now()})
            return copy.deepcopy(row)

    # ---- swap requests ----

    async def get_swap_request(self, request_id: str) -> Optional[Dict[str, Any]]:
        row = self.swap_requests.get(request_id)
        return copy.deepcopy(row) if row else None

    async def list_swap_requests(self, user_id: str) -> List[Dict[str, Any]]:
        return self._newest_first([
            r for r in self.swap_requests.values()
            if r["from_user_id"] == user_id or r["to_user_id"] == user_id
        ])

    async def insert_swap_request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            row = {
                "status": SwapStatus.PENDING.value,
                "completed_at": None,
                **copy.deepcopy(data),
                "id": str(uuid.uuid4()),
                "created_at": _now(),
            }
            self.swap_requests[row["id"]] = row
            self._track(row["id"])
            return copy.deepcopy(row)

    async def update_swap_request(
        self,
        request_id: str,
        data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        async with self._lock:
            row = self.swap_requests.get(request_id)
            if row is None:
                return None
            row.update(copy.deepcopy(data))
            return copy.deepcopy(row)

    async def delete_swap_request(self, request_id: str) -> bool:
        async with self._lock:
            return self.swap_requests.pop(request_id, None) is not None

    # ---- ratings ----

    async def list_ratings(self, user_id: str) -> List[Dict[str, Any]]:
        return self._newest_first([
            r for r in self.ratings.values()
            if r["from_user_id"] == user_id or r["to_user_id"] == user_id
        ])

    async def find_ratings(self, swap_request_id: str, from_user_id: str) -> List[Dict[str, Any]]:
        return self._newest_first([
            r for r in self.ratings.values()
            if r["swap_request_id"] == swap_request_id and r["from_user_id"] == from_user_id
        ])

    async def insert_rating(self, data: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            row = {
                "comment": "",
                **copy.deepcopy(data),
                "id": str(uuid.uuid4()),
                "created_at": _now(),
            }
            self.ratings[row["id"]] = row
            self._track(row["id"])
            return copy.deepcopy(row)
