"""
Pydantic schemas for subscription payloads.

Clients send start and end dates as ``MM-YYYY`` month/year strings;
they are parsed here into the first day of that month.  Responses use
ISO dates and timestamps.  Business rules (non‑empty name, price,
date ordering, UUID user id) are enforced by the service layer, not by
these schemas.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from subscription_api.app.models import Subscription, SubscriptionInput


def parse_month_year(value: str) -> date:
    """Parse ``MM-YYYY`` into the first day of that month."""
    try:
        return datetime.strptime(value, "%m-%Y").date()
    except (TypeError, ValueError):
        raise ValueError("must be in MM-YYYY format")


class SubscriptionWrite(BaseModel):
    """Request body for creating or fully replacing a subscription."""

    model_config = ConfigDict(extra="forbid")

    service_name: str = Field(..., examples=["Yandex Plus"])
    price: int = Field(..., examples=[400], description="Monthly cost in minor currency units")
    user_id: str = Field(..., examples=["60601fee-2bf1-4721-ae6f-7636e79a0cba"])
    start_date: date = Field(..., examples=["07-2025"], description="Month and year, MM-YYYY")
    end_date: Optional[date] = Field(
        None,
        examples=["12-2025"],
        description="Month and year, MM-YYYY; defaults to start_date + 30 days",
    )

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def validate_month_year(cls, v):
        if v is None or isinstance(v, date):
            return v
        return parse_month_year(v)

    def to_input(self) -> SubscriptionInput:
        return SubscriptionInput(
            service_name=self.service_name,
            price=self.price,
            user_id=self.user_id,
            start_date=self.start_date,
            end_date=self.end_date,
        )


class SubscriptionRead(BaseModel):
    """Schema for a subscription returned by the API."""

    id: str
    service_name: str
    price: int
    user_id: str
    start_date: date
    end_date: date
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
    }

    @classmethod
    def from_subscription(cls, sub: Subscription) -> "SubscriptionRead":
        return cls.model_validate(sub)


class TotalCostRead(BaseModel):
    """Total monthly cost of the subscriptions overlapping a period."""

    total: int
