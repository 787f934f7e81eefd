"""Travel gallery Pydantic schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .common import Page


class PackageGalleryCount(BaseModel):
    title: str
    slug: str
    gallery_count: int = Field(..., ge=0, description="Gallery images stored for the package")


class PackageGalleryPage(Page):
    items: List[PackageGalleryCount]


class PackageOption(BaseModel):
    """Package choice offered by the upload form."""

    id: int
    title: str


class GalleryImage(BaseModel):
    slug: str
    name: str = Field(..., description="Stored file name of the image and its thumbnail")
    uploaded_by: Optional[int] = None


class PackageGalleries(BaseModel):
    title: str
    slug: str
    travel_galleries: List[GalleryImage]
