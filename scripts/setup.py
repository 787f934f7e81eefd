#!/usr/bin/env python3
"""Setup script for the RelaxArc back-office API."""

import asyncio
import logging
import sys
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from backoffice.core.database import async_session_factory, close_db
from backoffice.models import Transaction, TransactionDetail, TransactionStatus, TravelPackage
from backoffice.services.transaction_service import TransactionService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_PACKAGES = [
    ("Bali Island Escape", "bali-island-escape", "Bali, Indonesia"),
    ("Kyoto Temple Trail", "kyoto-temple-trail", "Kyoto, Japan"),
    ("Lombok Surf Week", "lombok-surf-week", "Lombok, Indonesia"),
]


def run_migrations() -> None:
    """Upgrade the database to the latest Alembic revision."""
    logger.info("Running database migrations...")
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data():
    """Create published packages with a few transactions each."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        try:
            existing = (await db.execute(select(func.count(TravelPackage.id)))).scalar_one()
            if existing > 0:
                logger.info("Sample data already exists, skipping...")
                return

            invoices = TransactionService(db)
            statuses = list(TransactionStatus)
            for index, (title, slug, location) in enumerate(SAMPLE_PACKAGES):
                package = TravelPackage(title=title, slug=slug, location=location, status=1)
                db.add(package)
                await db.flush()  # Get the package ID

                for offset in range(4):
                    transaction = Transaction(
                        invoice_number=invoices.generate_invoice_number(),
                        travel_package_id=package.id,
                        total=(index + 1) * 2_500_000,
                        status=statuses[(index + offset) % len(statuses)].value,
                    )
                    db.add(transaction)
                    await db.flush()
                    db.add(TransactionDetail(transaction_id=transaction.id, username=f"guest{offset}", nationality="ID"))

            await db.commit()
            logger.info("Sample data created successfully!")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise


async def main():
    """Main setup function."""
    logger.info("Starting back-office API setup...")

    # Alembic's async env runs its own event loop
    await asyncio.to_thread(run_migrations)

    await create_sample_data()
    await close_db()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn backoffice.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
