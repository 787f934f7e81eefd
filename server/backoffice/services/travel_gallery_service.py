"""Travel gallery uploads with per-package capacity and file cleanup."""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import CapacityExceededError, NotFoundError, PersistenceWriteFailedError
from ..core.observability import get_logger, metrics_collector
from ..models.travel_gallery import TravelGallery
from .action_runner import ActionRunner, Outcome
from .image_storage import FULL_SIZE, THUMBNAIL_SIZE, ImageStorage, build_stored_file_name
from .persistence import PersistenceGateway
from .travel_package_service import TravelPackageService

logger = get_logger(__name__)

CREATE_SUCCESS = "Travel gallery created successfully"
DELETE_SUCCESS = "Travel gallery deleted successfully"

CREATE_FAILED = "Failed to create new travel gallery"
DELETE_FAILED = "Failed to delete travel gallery"


@dataclass(frozen=True)
class UploadedImage:
    """An uploaded image as received from the client."""
    filename: str
    content: bytes


class TravelGalleryService:
    """Service for travel gallery uploads and deletions."""

    def __init__(self, db: AsyncSession, storage: ImageStorage, max_items: Optional[int] = None):
        self.db = db
        self.storage = storage
        self.max_items = settings.gallery_max_items if max_items is None else max_items
        self.gateway = PersistenceGateway(db)
        self.runner = ActionRunner(self.gateway)
        self.package_service = TravelPackageService(db)

    async def get_gallery_by_slug_or_raise(self, slug: str) -> TravelGallery:
        """
        Get a gallery image record by slug or raise NotFoundError.

        Raises:
            NotFoundError: If no gallery has this slug
        """
        stmt = select(TravelGallery).where(TravelGallery.slug == slug)
        gallery = (await self.db.execute(stmt)).scalar_one_or_none()
        if not gallery:
            logger.warning("Travel gallery not found", slug=slug)
            raise NotFoundError(resource_type="travel gallery", resource_id=slug)
        return gallery

    async def create_gallery(self, travel_package_id: int, image: UploadedImage, actor_id: int) -> Outcome:
        """
        Store an uploaded image for a package as a full-size copy and a thumbnail.

        Runs as one transaction holding a row lock on the package, so two
        concurrent uploads cannot both pass the capacity check. If the unit
        fails at any point after the first file was written, including its
        commit, both files are removed before the error is reported.
        """
        written = []

        async def action():
            await self.package_service.get_package_by_id_or_raise(travel_package_id, lock=True)

            current = await self.package_service.count_galleries(travel_package_id)
            if current >= self.max_items:
                raise CapacityExceededError(self.max_items, current_items=current)

            file_name = build_stored_file_name(image.filename)
            written.append(file_name)
            await self._write_images(image.content, file_name)

            result = await self.gateway.create(TravelGallery, {
                "slug": Path(file_name).stem,
                "name": file_name,
                "travel_package_id": travel_package_id,
                "uploaded_by": actor_id,
            })
            if not result.ok:
                raise PersistenceWriteFailedError(CREATE_FAILED, reason=result.failure.value)

            logger.info(
                "Travel gallery stored",
                travel_package_id=travel_package_id,
                file_name=file_name,
                gallery_count=current + 1,
            )

        async def discard_images():
            for file_name in written:
                await self._delete_images(file_name, stage="compensation")

        return await self.runner.run(
            CREATE_SUCCESS,
            action,
            use_transaction=True,
            operation="travel_gallery.create",
            failure_message=CREATE_FAILED,
            on_failure=discard_images,
        )

    async def delete_gallery(self, slug: str) -> Outcome:
        """
        Delete a gallery record, then both of its image files.

        Files are only touched once the record is gone; a file that cannot
        be removed afterwards is logged and counted but does not fail the
        action.

        Raises:
            NotFoundError: If no gallery has this slug
        """
        gallery = await self.get_gallery_by_slug_or_raise(slug)
        file_name = gallery.name

        async def action():
            result = await self.gateway.delete(gallery)
            if not result.ok:
                raise PersistenceWriteFailedError(DELETE_FAILED, reason=result.failure.value)
            await self._delete_images(file_name, stage="delete")

        return await self.runner.run(DELETE_SUCCESS, action, operation="travel_gallery.delete")

    async def _write_images(self, content: bytes, file_name: str) -> None:
        paths = self.storage.gallery_paths(file_name)
        for variant, path, (width, height) in (
            ("full", paths.image, FULL_SIZE),
            ("thumbnail", paths.thumbnail, THUMBNAIL_SIZE),
        ):
            await asyncio.to_thread(self.storage.resize_and_save, content, width, height, path)
            metrics_collector.record_image_stored(variant)

    async def _delete_images(self, file_name: str, stage: str) -> None:
        for path in self.storage.gallery_paths(file_name):
            if not await asyncio.to_thread(self.storage.delete_file, path):
                metrics_collector.record_cleanup_failure(stage)
                logger.warning(
                    "Gallery image file left behind",
                    stage=stage,
                    file_name=file_name,
                    path=str(path),
                )
