"""Request/response models for subject access and the payment link."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AccessResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_access: bool = Field(..., alias="hasAccess", description="Whether the caller may view the subject's content")
    end_date: Optional[datetime] = Field(None, alias="endDate", description="End of the granting subscription")


class PaymentLinkResponse(BaseModel):
    url: str = Field(..., description="wa.me deep link with the prefilled message")
    message: str
    price: str
    currency: str
