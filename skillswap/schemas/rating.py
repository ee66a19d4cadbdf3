from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

MAX_COMMENT_LENGTH = 500

class RatingCreate(BaseModel):
    swap_request_id: str
    # Defaults to the other party of the swap request
    to_user_id: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=MAX_COMMENT_LENGTH)

class Rating(BaseModel):
    id: str
    swap_request_id: str
    from_user_id: str
    to_user_id: str
    rating: int
    comment: str = ""
    created_at: datetime
