"""
Subscription endpoints for API v1.

These routes expose CRUD operations on subscription records and the
total cost of subscriptions over a period.  Request bodies use
``MM-YYYY`` month/year strings for dates; the period query for the
total uses full ``YYYY-MM-DD`` dates.

Domain errors from the service are mapped to HTTP status codes here:
invalid input becomes 400 and a missing record becomes 404.  Any other
error propagates and is reported by the framework as a 500.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from subscription_api.app.core.errors import InvalidInputError, NotFoundError
from subscription_api.app.models import ListFilter
from subscription_api.app.schemas.subscription import (
    SubscriptionRead,
    SubscriptionWrite,
    TotalCostRead,
)
from subscription_api.app.services.subscription_service import SubscriptionService

router = APIRouter()


def get_subscription_service(request: Request) -> SubscriptionService:
    """Return the service instance built by ``create_app``."""
    return request.app.state.subscription_service


@router.post("/", response_model=SubscriptionRead, status_code=status.HTTP_201_CREATED)
async def create_subscription(
    sub_in: SubscriptionWrite,
    response: Response,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionRead:
    """Create a subscription.

    Returns the stored record with a ``Location`` header pointing at
    it.  When ``end_date`` is omitted it defaults to 30 days after the
    start of ``start_date``'s month.
    """
    try:
        sub = await service.create(sub_in.to_input())
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    response.headers["Location"] = f"/api/v1/subscriptions/{sub.id}"
    return SubscriptionRead.from_subscription(sub)


@router.get("/", response_model=List[SubscriptionRead])
async def list_subscriptions(
    user_id: Optional[str] = Query(None, description="Exact user id to match"),
    service_name: Optional[str] = Query(None, description="Exact service name to match"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: SubscriptionService = Depends(get_subscription_service),
) -> List[SubscriptionRead]:
    """Return a page of subscriptions, most recently created first."""
    filters = ListFilter(
        user_id=user_id or None,
        service_name=service_name or None,
        limit=limit,
        offset=offset,
    )
    try:
        subs = await service.list(filters)
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    return [SubscriptionRead.from_subscription(sub) for sub in subs]


@router.get("/total", response_model=TotalCostRead)
async def get_total_cost(
    period_start: date = Query(..., alias="from", description="First day of the period, YYYY-MM-DD"),
    period_end: date = Query(..., alias="to", description="Last day of the period, YYYY-MM-DD"),
    user_id: Optional[str] = Query(None),
    service_name: Optional[str] = Query(None),
    service: SubscriptionService = Depends(get_subscription_service),
) -> TotalCostRead:
    """Sum the monthly price of every subscription overlapping the period.

    A subscription is counted if it starts on or before ``to`` and ends
    on or after ``from``.
    """
    try:
        total = await service.sum_for_period(
            period_start,
            period_end,
            user_id=user_id or None,
            service_name=service_name or None,
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    return TotalCostRead(total=total)


@router.get("/{subscription_id}", response_model=SubscriptionRead)
async def get_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionRead:
    """Retrieve a single subscription by ID.

    Returns HTTP 404 if the subscription does not exist.
    """
    try:
        sub = await service.get(subscription_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    return SubscriptionRead.from_subscription(sub)


@router.put("/{subscription_id}", response_model=SubscriptionRead)
async def update_subscription(
    subscription_id: str,
    sub_in: SubscriptionWrite,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionRead:
    """Replace every mutable field of an existing subscription."""
    try:
        sub = await service.update(subscription_id, sub_in.to_input())
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    return SubscriptionRead.from_subscription(sub)


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subscription(
    subscription_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
) -> None:
    """Delete a subscription.  Returns HTTP 404 if it does not exist."""
    try:
        await service.delete(subscription_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    return None
