import asyncio
import logging

from app.db.session import async_session, engine
from app.services.property_reconciler import reconcile_property_status


async def main():
    async with async_session() as db:
        repaired = await reconcile_property_status(db)
    print(f"Repaired {len(repaired)} properties")

    await engine.dispose()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(main())
# Marks properties holding a finalized interest as sold when the sold cascade was lost. Run: python -m app.scripts.reconcile_property_status
