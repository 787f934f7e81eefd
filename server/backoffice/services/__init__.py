"""Service layer package."""

from .action_runner import ActionRunner, Outcome
from .image_storage import ImageStorage
from .persistence import PersistenceGateway, WriteFailure, WriteResult
from .transaction_service import TransactionService
from .travel_gallery_service import TravelGalleryService, UploadedImage
from .travel_package_service import TravelPackageService

__all__ = [
    "ActionRunner",
    "Outcome",
    "ImageStorage",
    "PersistenceGateway",
    "WriteFailure",
    "WriteResult",
    "TransactionService",
    "TravelGalleryService",
    "TravelPackageService",
    "UploadedImage",
]
