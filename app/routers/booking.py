from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis
from typing import Optional
from uuid import UUID
import logging
import traceback

from app.schemas.booking import (
    BuyNowRequest,
    InterestStatusUpdateRequest,
    CancelBookingRequest,
    MessageResponse,
    BookingListResponse,
    ManagedPropertyListResponse,
)
from app.db.session import get_db
from app.db.redis_client import get_redis
from app.core.security import get_current_user_id
from app.services.booking_services import BookingServices
from app.services.exceptions import ConflictError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/property", tags=["Bookings"])


@router.post(
    "/buy-now",
    response_model=MessageResponse,
    summary="Express interest in a property",
    description="Creates a pending interest for the caller and notifies the property's agent."
)
async def buy_now(
    request: BuyNowRequest,
    caller_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await BookingServices.express_interest_service(caller_id, request.property, db)
    except ConflictError as e:
        raise HTTPException(status_code=400, detail=e.to_detail())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in buy_now: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get(
    "/my/bookings",
    response_model=BookingListResponse,
    summary="List my bookings",
    description="Interests the caller has expressed, with property and agent details."
)
async def my_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(5, ge=1, le=100),
    search: Optional[str] = Query(None, description="Case-insensitive property name filter"),
    caller_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await BookingServices.my_bookings_service(caller_id, page, limit, search, db)
    except Exception as e:
        logger.error("Error in my_bookings: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get(
    "/my/property/manage",
    response_model=ManagedPropertyListResponse,
    summary="List my properties with their interested parties",
)
async def manage_properties(
    page: int = Query(1, ge=1),
    limit: int = Query(5, ge=1, le=100),
    search: Optional[str] = Query(None, description="Case-insensitive property name filter"),
    caller_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await BookingServices.manage_properties_service(caller_id, page, limit, search, db)
    except Exception as e:
        logger.error("Error in manage_properties: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/my/property/manage/status",
    response_model=MessageResponse,
    summary="Update an interest's status",
    description="Agent-only. Finalizing an interest marks the property as sold; only one interest per property can be finalized."
)
async def update_interest_status(
    request: InterestStatusUpdateRequest,
    caller_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    try:
        return await BookingServices.update_status_service(caller_id, request, db, redis)
    except ConflictError as e:
        raise HTTPException(status_code=400, detail=e.to_detail())
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in update_interest_status: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/my/bookings/cancel",
    response_model=MessageResponse,
    summary="Cancel my booking",
)
async def cancel_booking(
    request: CancelBookingRequest,
    caller_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await BookingServices.cancel_booking_service(caller_id, request, db)
    except ConflictError as e:
        raise HTTPException(status_code=400, detail=e.to_detail())
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in cancel_booking: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
