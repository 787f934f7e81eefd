"""Travel package reads used by the gallery screens."""

import math
import operator
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import NotFoundError
from ..core.observability import get_logger
from ..models.travel_gallery import TravelGallery
from ..models.travel_package import PUBLISHED_BASELINE_STATUS, TravelPackage

logger = get_logger(__name__)

STATUS_OPERATORS = {
    ">": operator.gt,
    ">=": operator.ge,
    "=": operator.eq,
    "<": operator.lt,
    "<=": operator.le,
}


def package_by_id(package_id: int, lock: bool = False):
    """``SELECT`` of one package; ``lock`` adds ``FOR UPDATE``."""
    stmt = select(TravelPackage).where(TravelPackage.id == package_id)
    if lock:
        stmt = stmt.with_for_update()
    return stmt


class TravelPackageService:
    """Service for read-only travel package lookups."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _status_condition(self, status_operator: str):
        try:
            compare = STATUS_OPERATORS[status_operator]
        except KeyError:
            raise ValueError(f"Unsupported status operator '{status_operator}'")
        return compare(TravelPackage.status, PUBLISHED_BASELINE_STATUS)

    async def get_package_by_id_or_raise(self, package_id: int, lock: bool = False) -> TravelPackage:
        """
        Get a travel package by id or raise NotFoundError.

        Args:
            package_id: Travel package id
            lock: Take a row lock (``SELECT ... FOR UPDATE``) for the rest of
                the current transaction

        Raises:
            NotFoundError: If no package has this id
        """
        package = (await self.db.execute(package_by_id(package_id, lock))).scalar_one_or_none()
        if not package:
            logger.warning("Travel package not found", travel_package_id=package_id)
            raise NotFoundError(resource_type="travel package", resource_id=str(package_id))
        return package

    async def get_package_by_slug_or_raise(self, slug: str) -> TravelPackage:
        stmt = select(TravelPackage).where(TravelPackage.slug == slug)
        package = (await self.db.execute(stmt)).scalar_one_or_none()
        if not package:
            logger.warning("Travel package not found", slug=slug)
            raise NotFoundError(resource_type="travel package", resource_id=slug)
        return package

    async def count_galleries(self, package_id: int) -> int:
        stmt = select(func.count(TravelGallery.id)).where(TravelGallery.travel_package_id == package_id)
        return (await self.db.execute(stmt)).scalar_one()

    async def list_packages_with_gallery_count(
        self,
        keyword: Optional[str] = None,
        status_operator: str = ">",
        page: int = 1,
    ) -> dict[str, Any]:
        """
        Page through packages with the number of gallery images each holds.

        Args:
            keyword: Case-insensitive substring of the package title
            status_operator: Comparison of the package status against the
                published baseline; ``>`` keeps published packages only
            page: 1-based page number
        """
        conditions = [self._status_condition(status_operator)]
        if keyword:
            conditions.append(TravelPackage.title.ilike(f"%{keyword}%"))

        total = (
            await self.db.execute(select(func.count(TravelPackage.id)).where(*conditions))
        ).scalar_one()

        gallery_count = (
            select(func.count(TravelGallery.id))
            .where(TravelGallery.travel_package_id == TravelPackage.id)
            .correlate(TravelPackage)
            .scalar_subquery()
        )
        per_page = settings.page_size
        stmt = (
            select(TravelPackage.title, TravelPackage.slug, gallery_count.label("gallery_count"))
            .where(*conditions)
            .order_by(TravelPackage.created_at.desc(), TravelPackage.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        rows = (await self.db.execute(stmt)).all()

        return {
            "items": [
                {"title": row.title, "slug": row.slug, "gallery_count": row.gallery_count}
                for row in rows
            ],
            "page": page,
            "per_page": per_page,
            "total": total,
            "last_page": max(1, math.ceil(total / per_page)),
        }

    async def list_package_options(self, status_operator: str = ">") -> list[dict[str, Any]]:
        """Id and title of every package that may receive gallery uploads, newest first."""
        stmt = (
            select(TravelPackage.id, TravelPackage.title)
            .where(self._status_condition(status_operator))
            .order_by(TravelPackage.created_at.desc(), TravelPackage.id.desc())
        )
        rows = (await self.db.execute(stmt)).all()
        return [{"id": row.id, "title": row.title} for row in rows]

    async def get_package_galleries(self, slug: str) -> dict[str, Any]:
        """Title of the package with this slug and its gallery images."""
        package = await self.get_package_by_slug_or_raise(slug)
        stmt = (
            select(TravelGallery)
            .where(TravelGallery.travel_package_id == package.id)
            .order_by(TravelGallery.id)
        )
        galleries = (await self.db.execute(stmt)).scalars().all()
        return {
            "title": package.title,
            "slug": package.slug,
            "travel_galleries": [
                {"slug": gallery.slug, "name": gallery.name, "uploaded_by": gallery.uploaded_by}
                for gallery in galleries
            ],
        }
