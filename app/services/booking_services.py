from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from redis.asyncio import Redis
from redis.exceptions import LockError
from typing import Optional
import logging
import os

from app.crud import interest as crud_interest
from app.crud import property as crud_property
from app.schemas.booking import (
    InterestStatusUpdateRequest,
    CancelBookingRequest,
    BookingItem,
    BookingListResponse,
    ManagedPropertyItem,
    ManagedPropertyListResponse,
)
from app.services.notification_services import NotificationServices
from app.services.exceptions import (
    AlreadyFinalizedError,
    BookingFinalizedError,
    DuplicateInterestError,
    InternalError,
    NotFoundError,
    NotFoundOrUnauthorizedError,
    SelfInterestError,
)

logger = logging.getLogger(__name__)

FINALIZE_LOCK_TIMEOUT = float(os.getenv("FINALIZE_LOCK_TIMEOUT", "10"))
FINALIZE_LOCK_WAIT = 5.0


def finalize_lock_key(property_id: UUID) -> str:
    return f"lock:property:{property_id}:finalize"


class BookingServices:
    """
        Orchestrates the interest (booking) lifecycle.

        Every action runs the same fixed sequence, one step after another:
        1. Validate the ledger precondition.
        2. Write the interest and commit. From here on the booking decision is durable.
        3. Find-or-create the (user, agent, property) thread and record the event.
        4. On finalization only, mark the property `sold`.

        Steps 3 and 4 are best-effort: a failure there is logged and rolled back
        on its own, never undoing step 2. A lost property cascade is repaired by
        `app.services.property_reconciler.reconcile_property_status`.

        Finalization is serialized per property with a Redis lock, and a partial
        unique index on `interests(property_id) WHERE status = 'finalized'`
        rejects a second finalized row should two writers still race.
    """

    # ---------------- side effects ----------------

    @staticmethod
    async def _notify(
        db: AsyncSession,
        user_id: UUID,
        agent_id: UUID,
        property_id: UUID,
        event_type: str,
        message: Optional[str] = None,
    ) -> None:
        try:
            thread = await NotificationServices.find_or_create(db, user_id, agent_id, property_id, event_type)
            if message:
                await NotificationServices.append_message(db, thread, user_id, message, type=event_type)
            else:
                await NotificationServices.record_event(db, thread, event_type)
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception(
                "Failed to record %s notification for user=%s agent=%s property=%s",
                event_type, user_id, agent_id, property_id,
            )

    @staticmethod
    async def _cascade_sold(db: AsyncSession, property_id: UUID) -> None:
        try:
            if await crud_property.mark_sold(db, property_id):
                await db.commit()
                logger.info("Property %s marked as sold", property_id)
            else:
                await db.rollback()
                logger.warning("Property %s vanished before it could be marked as sold", property_id)
        except Exception:
            await db.rollback()
            logger.exception("Failed to mark property %s as sold", property_id)

    # ---------------- express interest ----------------

    @staticmethod
    async def express_interest_service(caller_id: UUID, property_id: UUID, db: AsyncSession) -> dict:
        """
        Record the caller's interest in a property ("buy now").

        Raises:
            NotFoundError: the property does not exist.
            SelfInterestError: the caller owns the property.
            DuplicateInterestError: the caller already holds a live interest in it.
        """
        prop = await crud_property.get_property(db, property_id)
        if not prop:
            raise NotFoundError("Property not found.")
        if prop.owner_id == caller_id:
            raise SelfInterestError()

        existing = await crud_interest.get_active_interest(db, caller_id, property_id)
        if existing:
            raise DuplicateInterestError(existing.id)

        agent_id = prop.owner_id
        interest = await crud_interest.create_interest(db, caller_id, agent_id, property_id)
        interest_id = interest.id
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            existing = await crud_interest.get_active_interest(db, caller_id, property_id)
            if existing is None:
                raise
            raise DuplicateInterestError(existing.id)

        logger.info("Interest %s created: user=%s property=%s agent=%s", interest_id, caller_id, property_id, agent_id)

        await BookingServices._notify(db, caller_id, agent_id, property_id, "interest")
        return {"message": "Thank you for showing interest! An agent will contact you soon."}

    # ---------------- status update ----------------

    @staticmethod
    async def _finalize(db: AsyncSession, interest, property_id: UUID) -> None:
        interest_id = interest.id

        # row lock on the property for the rest of this transaction
        await crud_property.get_property(db, property_id, for_update=True)

        conflicting = await crud_interest.get_finalized_interest(db, property_id, exclude_id=interest_id)
        if conflicting:
            conflicting_id = conflicting.id
            await db.rollback()
            raise AlreadyFinalizedError(conflicting_id)

        interest.status = "finalized"
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            conflicting = await crud_interest.get_finalized_interest(db, property_id, exclude_id=interest_id)
            if conflicting is None:
                raise
            raise AlreadyFinalizedError(conflicting.id)

    @staticmethod
    async def update_status_service(
        caller_id: UUID,
        request: InterestStatusUpdateRequest,
        db: AsyncSession,
        redis: Redis,
    ) -> dict:
        """
        Move an interest to a new status on behalf of its agent.

        The interest must match (interestId, user, property) AND have the caller
        as agent of record; any mismatch is reported as the same not-found error
        so callers cannot probe for interests they do not manage.

        Raises:
            NotFoundOrUnauthorizedError: no interest matches the tuple for this agent.
            AlreadyFinalizedError: another interest on the property is finalized.
            BookingFinalizedError: the interest is finalized and the new status is not.
            InternalError: the per-property finalization lock could not be taken.
        """
        interest = await crud_interest.get_interest_for_agent(
            db, request.interest_id, request.user, request.property, caller_id
        )
        if not interest:
            raise NotFoundOrUnauthorizedError()

        previous_status = interest.status
        if previous_status == "finalized" and request.status != "finalized":
            raise BookingFinalizedError(interest.id)

        if request.status == "finalized":
            lock = redis.lock(
                finalize_lock_key(request.property),
                timeout=FINALIZE_LOCK_TIMEOUT,
                blocking_timeout=FINALIZE_LOCK_WAIT,
            )
            if not await lock.acquire():
                raise InternalError("Property is being finalized by another request, try again.")
            try:
                await BookingServices._finalize(db, interest, request.property)
            finally:
                try:
                    await lock.release()
                except LockError:
                    logger.warning("Finalize lock for property %s expired before release", request.property)
        else:
            interest.status = request.status
            await db.commit()

        logger.info(
            "Interest %s status %s -> %s by agent %s",
            request.interest_id, previous_status, request.status, caller_id,
        )

        await BookingServices._notify(db, request.user, caller_id, request.property, "status")

        if request.status == "finalized":
            await BookingServices._cascade_sold(db, request.property)

        return {"message": "Status updated successfully."}

    # ---------------- cancel ----------------

    @staticmethod
    async def cancel_booking_service(caller_id: UUID, request: CancelBookingRequest, db: AsyncSession) -> dict:
        """
        Withdraw the caller's interest and post the reason to the thread.

        Raises:
            NotFoundError: the caller holds no interest for (agent, property).
            BookingFinalizedError: the interest is already finalized.
        """
        interest = await crud_interest.get_interest_for_cancel(db, caller_id, request.agent, request.property)
        if not interest:
            raise NotFoundError("Booking not found")
        if interest.status == "finalized":
            raise BookingFinalizedError(interest.id)

        interest.withdraw_reason = request.message
        interest.status = "withdrawn"
        interest.is_cancelled = True
        interest_id = interest.id
        await db.commit()

        logger.info("Interest %s withdrawn by user %s", interest_id, caller_id)

        await BookingServices._notify(
            db, caller_id, request.agent, request.property, "booking_cancel", message=request.message
        )
        return {"message": "Your booking has been cancelled successfully"}

    # ---------------- list views ----------------

    @staticmethod
    async def my_bookings_service(
        caller_id: UUID,
        page: int,
        limit: int,
        search: Optional[str],
        db: AsyncSession,
    ) -> BookingListResponse:
        offset = (page - 1) * limit
        listings, total = await crud_interest.get_user_bookings(db, caller_id, search, offset, limit)
        has_more = offset + len(listings) < total
        return BookingListResponse(
            listings=[BookingItem.model_validate(i) for i in listings],
            has_more=has_more,
            next_page=page + 1 if has_more else None,
        )

    @staticmethod
    async def manage_properties_service(
        caller_id: UUID,
        page: int,
        limit: int,
        search: Optional[str],
        db: AsyncSession,
    ) -> ManagedPropertyListResponse:
        offset = (page - 1) * limit
        listings, total = await crud_property.get_owned_properties(db, caller_id, search, offset, limit)
        has_more = offset + len(listings) < total
        return ManagedPropertyListResponse(
            listings=[ManagedPropertyItem.model_validate(p) for p in listings],
            has_more=has_more,
            next_page=page + 1 if has_more else None,
        )
