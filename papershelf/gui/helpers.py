"""Form parsing shared by the add and edit routes."""

from typing import Any, Optional

from starlette.datastructures import FormData, UploadFile

from papershelf.models.paper import Submission
from papershelf.services.upload_service import PdfStorage


def _field(form: FormData, name: str) -> Optional[str]:
    value = form.get(name)
    return value if isinstance(value, str) else None


def _multi(form: FormData, name: str) -> Any:
    """Form values for *name*: None, a lone string, or a list."""
    values = [v for v in form.getlist(name) if isinstance(v, str)]
    if not values:
        return None
    return values[0] if len(values) == 1 else values


def store_upload(form: FormData, storage: PdfStorage, field: str = "pdf") -> Optional[str]:
    """Save the uploaded PDF in *field*, if any.

    Raises:
        ValidationError: the uploaded file is not a PDF
    """
    upload = form.get(field)
    if not isinstance(upload, UploadFile) or not upload.filename:
        return None
    return storage.save(upload.filename, upload.content_type, upload.file)


def submission_from_form(form: FormData, pdf_path: Optional[str]) -> Submission:
    """Build a :class:`Submission` from add/edit form data.

    Args:
        form: Parsed multipart/urlencoded body
        pdf_path: Stored upload name, or None to fall back to the
            ``pdf_path`` field (kept value on edit)
    """
    return Submission(
        title=_field(form, "title") or "",
        summary=_field(form, "summary"),
        link=_field(form, "link"),
        pdf_path=pdf_path or _field(form, "pdf_path"),
        selected_tags=_multi(form, "tags"),
        new_tags=_field(form, "new_tags"),
        category=_multi(form, "category"),
        new_category=_field(form, "new_category"),
        subcategory=_multi(form, "subcategory"),
        new_subcategory=_field(form, "new_subcategory"),
    )


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """'1'/'true'/'on'/'yes' → True, '0'/'false'/'off'/'no' → False, else None."""
    if value is None:
        return None
    value = value.strip().lower()
    if value in ("1", "true", "on", "yes"):
        return True
    if value in ("0", "false", "off", "no"):
        return False
    return None
