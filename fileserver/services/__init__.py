"""Service layer for transfer and browsing logic."""

from fileserver.services.browse_service import BrowseService
from fileserver.services.transfer_service import (
    TransferRequest,
    TransferResponse,
    TransferService,
)

__all__ = [
    "BrowseService",
    "TransferRequest",
    "TransferResponse",
    "TransferService",
]
