from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID
from typing import List
import logging

from app.crud import property as crud_property

logger = logging.getLogger(__name__)


async def reconcile_property_status(db: AsyncSession) -> List[UUID]:
    """
    Repair the finalization cascade.

    Marking a property `sold` happens after the finalized interest is already
    committed and is allowed to fail. This sweep finds every property that holds
    a finalized interest but is not `sold`, and marks it. Safe to run repeatedly.

    Returns:
        List[UUID]: ids of the properties that were repaired.
    """
    property_ids = await crud_property.get_unsold_with_finalized_interest(db)
    for property_id in property_ids:
        await crud_property.mark_sold(db, property_id)
        logger.warning("Property %s had a finalized interest but was not sold; marked as sold", property_id)

    await db.commit()
    logger.info("Property status reconciliation finished, %d repaired", len(property_ids))
    return property_ids
