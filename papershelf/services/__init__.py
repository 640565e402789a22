"""Service layer."""

from papershelf.services.paper_service import PaperService
from papershelf.services.upload_service import PdfStorage

__all__ = [
    "PaperService",
    "PdfStorage",
]
