"""Travel gallery router: package overview, uploads and deletions."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import get_db
from ..core.dependencies import RequiredAuth, Storage
from ..core.exceptions import ValidationError
from ..schemas.common import ActionResponse, RouteKey
from ..schemas.travel_gallery import PackageGalleries, PackageGalleryPage, PackageOption
from ..services.image_storage import ImageStorage
from ..services.travel_gallery_service import TravelGalleryService, UploadedImage
from ..services.travel_package_service import TravelPackageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/travel-galleries", tags=["travel-galleries"])

DB_DEPENDENCY = Depends(get_db)
PACKAGE_FORM = Form(..., ge=1, description="Travel package id")
IMAGE_FILE = File(..., description="Image to add to the package gallery")

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/jpg"}


async def _read_upload(image: UploadFile) -> UploadedImage:
    if image.content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            detail="The image must be a file of type: jpeg, jpg, png",
            errors={"image": image.content_type},
        )
    content = await image.read(settings.gallery_max_upload_bytes + 1)
    if not content:
        raise ValidationError(detail="The image must not be empty")
    if len(content) > settings.gallery_max_upload_bytes:
        raise ValidationError(
            detail=f"The image may not be greater than {settings.gallery_max_upload_bytes // 1024} kilobytes",
        )
    return UploadedImage(filename=image.filename or "image", content=content)


@router.get("", response_model=PackageGalleryPage)
async def list_packages(
    keyword: Optional[str] = Query(None, max_length=255, description="Package title contains"),
    page: int = Query(1, ge=1),
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = RequiredAuth,
):
    """Published packages with the number of gallery images each holds."""
    return await TravelPackageService(db).list_packages_with_gallery_count(keyword, ">", page)


@router.get("/packages", response_model=list[PackageOption])
async def list_package_options(db: AsyncSession = DB_DEPENDENCY, user: dict = RequiredAuth):
    """Packages an image can be uploaded for."""
    return await TravelPackageService(db).list_package_options(">")


@router.get("/{package_slug}", response_model=PackageGalleries)
async def show_package_galleries(
    package_slug: str,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = RequiredAuth,
):
    return await TravelPackageService(db).get_package_galleries(package_slug)


@router.post("", response_model=ActionResponse)
async def create_gallery(
    travel_package: int = PACKAGE_FORM,
    image: UploadFile = IMAGE_FILE,
    db: AsyncSession = DB_DEPENDENCY,
    storage: ImageStorage = Storage,
    user: dict = RequiredAuth,
):
    """Upload one image for a package; stored as full size and thumbnail."""
    upload = await _read_upload(image)
    outcome = await TravelGalleryService(db, storage).create_gallery(
        travel_package, upload, actor_id=user["user_id"]
    )
    logger.info(
        "Travel gallery upload handled",
        extra={"travel_package_id": travel_package, "ok": outcome.ok, "actor_id": user["user_id"]},
    )
    return ActionResponse.from_outcome(outcome, RouteKey.TRAVEL_GALLERIES_INDEX)


@router.delete("/{slug}", response_model=ActionResponse)
async def delete_gallery(
    slug: str,
    db: AsyncSession = DB_DEPENDENCY,
    storage: ImageStorage = Storage,
    user: dict = RequiredAuth,
):
    """Delete a gallery image and both of its files."""
    outcome = await TravelGalleryService(db, storage).delete_gallery(slug)
    return ActionResponse.from_outcome(outcome, RouteKey.TRAVEL_GALLERIES_INDEX)
