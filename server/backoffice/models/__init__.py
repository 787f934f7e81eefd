"""Models module exporting all database models."""

from .transaction import Active, RecordState, Transaction, TransactionDetail, TransactionStatus, Trashed
from .travel_gallery import TravelGallery
from .travel_package import PUBLISHED_BASELINE_STATUS, TravelPackage

__all__ = [
    # Catalogue
    "TravelPackage",
    "PUBLISHED_BASELINE_STATUS",
    "TravelGallery",

    # Bookings
    "Transaction",
    "TransactionDetail",
    "TransactionStatus",

    # Soft-delete state
    "Active",
    "Trashed",
    "RecordState",
]
