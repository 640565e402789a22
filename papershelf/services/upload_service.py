"""PDF upload storage."""

import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional

from papershelf.errors import ValidationError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
_UNSAFE_CHARS = re.compile(r"[^\w.\-]+")


def is_pdf(filename: Optional[str], content_type: Optional[str]) -> bool:
    """Accept by MIME type or by ``.pdf`` extension."""
    if content_type == PDF_CONTENT_TYPE:
        return True
    return bool(filename) and filename.lower().endswith(".pdf")


def safe_filename(filename: str) -> str:
    """Strip directories and replace anything outside ``[\\w.-]``."""
    name = Path(filename).name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "upload.pdf"


class PdfStorage:
    """Stores uploaded PDFs and hands back an opaque filename."""

    def __init__(self, upload_dir: Path):
        """Initialize storage.

        Args:
            upload_dir: Directory to save uploaded files
        """
        self.upload_dir = upload_dir
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def save(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        stream: BinaryIO,
    ) -> Optional[str]:
        """Save an uploaded file.

        Args:
            filename: Client-supplied file name (may be empty)
            content_type: Client-supplied MIME type
            stream: File object to copy from

        Returns:
            Stored file name, or None when no file was submitted

        Raises:
            ValidationError: the file is not a PDF
        """
        if not filename:
            return None
        if not is_pdf(filename, content_type):
            raise ValidationError(f"Only PDF files can be uploaded (got {filename})")

        stamp = datetime.now().strftime("%Y%m%d%H%M%S%f")
        stored = f"{stamp}-{safe_filename(filename)}"
        target = self.upload_dir / stored
        with open(target, "wb") as f:
            shutil.copyfileobj(stream, f)
        logger.info("Stored upload %s", stored)
        return stored

    def discard(self, stored: Optional[str]) -> None:
        """Delete a file stored by :meth:`save` (no-op for None)."""
        if not stored:
            return
        target = self.upload_dir / Path(stored).name
        if target.exists():
            target.unlink()
            logger.info("Discarded upload %s", stored)
