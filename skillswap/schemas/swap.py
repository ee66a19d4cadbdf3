from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

MAX_MESSAGE_LENGTH = 500

class SwapStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"

class SwapRequestCreate(BaseModel):
    to_user_id: str
    skill_offered: str = Field(..., max_length=100)
    skill_wanted: str = Field(..., max_length=100)
    message: str = Field(..., max_length=MAX_MESSAGE_LENGTH)

class SwapRequestUpdate(BaseModel):
    status: SwapStatus

class SwapRequest(BaseModel):
    id: str
    from_user_id: str
    to_user_id: str
    skill_offered: str
    skill_wanted: str
    message: str = ""
    status: SwapStatus = SwapStatus.PENDING
    created_at: datetime
    completed_at: Optional[datetime] = None

    def involves(self, user_id: str) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)

    def other_party(self, user_id: str) -> str:
        return self.to_user_id if user_id == self.from_user_id else self.from_user_id

class DashboardSummary(BaseModel):
    received_count: int
    sent_count: int
    pending_received: int
    completed_swaps: int
    recent_activity: List[SwapRequest]
    rating: float = 0
    total_ratings: int = 0
