"""Admin subscription and expiry job schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GrantSubscriptionsRequest(BaseModel):
    student_id: str
    subject_ids: List[str] = Field(..., min_length=1)
    duration_days: Optional[int] = Field(None, description="Ignored when end_date is given")
    end_date: Optional[datetime] = None


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    subject_id: str
    start_date: datetime
    end_date: datetime
    is_active: bool
    renewal_count: int


class SubscriptionListResponse(BaseModel):
    subscriptions: List[SubscriptionResponse]
