"""
Multipart plan builder.

Lays out the multipart/form-data body before anything is sent so that the
exact request length is known up front whenever every item has a known size.
"""
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from ..models import OtherField, Part, UploadItem, UploadPlan
from ...exceptions import UploadItemReadError
from ...logging import get_logger
from ...utils import format_size

logger = get_logger('httpsupload.upload.plan')

CRLF = '\r\n'
TWO_HYPHENS = '--'

# Fixed token. It only has to not occur inside any part.
DEFAULT_BOUNDARY = '*****X99611299X******'

FieldsArg = Optional[Union[Mapping[str, Optional[str]], Iterable[OtherField]]]


def _ascii(text: str) -> bytes:
    """Encode multipart header text, which must be US-ASCII."""
    try:
        return text.encode('ascii')
    except UnicodeEncodeError as e:
        raise ValueError(f"Multipart header must be US-ASCII: {text!r}") from e


class MultipartPlanBuilder:
    """
    Builds UploadPlans.
    
    Parts are laid out as: every item in caller order, then every field in
    iteration order, then the closing boundary.
    
    Example:
        >>> builder = MultipartPlanBuilder()
        >>> plan = builder.build(
        ...     [UploadItem.from_file("a.zip")],
        ...     {"email": "john@company.com"}
        ... )
        >>> plan.size_is_known
        True
    """
    
    def __init__(self, boundary: str = DEFAULT_BOUNDARY):
        """
        Initialize builder.
        
        Args:
            boundary: Multipart boundary token
        """
        if not boundary:
            raise ValueError("Boundary cannot be empty")
        if '\r' in boundary or '\n' in boundary:
            raise ValueError("Boundary cannot contain line breaks")
        _ascii(boundary)
        self._boundary = boundary
    
    @property
    def boundary(self) -> str:
        return self._boundary
    
    @property
    def content_type(self) -> str:
        """Returns the Content-Type header value for plans of this builder."""
        return f"multipart/form-data;boundary={self._boundary}"
    
    def build(self, items: Sequence[UploadItem], fields: FieldsArg = None) -> UploadPlan:
        """
        Build the plan for one request.
        
        Args:
            items: Files and streams to upload, in upload order
            fields: Plain text form fields, as a mapping or OtherFields
            
        Returns:
            UploadPlan
            
        Raises:
            UploadItemReadError: If a file item's size cannot be determined
            ValueError: If a header would contain non-ASCII text
        """
        item_parts = tuple(self._item_part(item) for item in items)
        field_parts = tuple(self._field_part(f) for f in self._normalize_fields(fields))
        closing = _ascii(f"{TWO_HYPHENS}{self._boundary}{TWO_HYPHENS}{CRLF}")
        
        size_is_known = all(part.payload_length is not None for part in item_parts)
        total_bytes = sum(part.length for part in item_parts + field_parts) + len(closing)
        
        plan = UploadPlan(
            boundary=self._boundary,
            item_parts=item_parts,
            field_parts=field_parts,
            closing=closing,
            total_bytes=total_bytes,
            size_is_known=size_is_known
        )
        
        if size_is_known:
            logger.debug(
                f"Plan: {len(item_parts)} items, {len(field_parts)} fields, "
                f"{format_size(total_bytes)} in total"
            )
        else:
            logger.debug(
                f"Plan: {len(item_parts)} items, {len(field_parts)} fields, "
                f"total size unknown"
            )
        return plan
    
    def _item_part(self, item: UploadItem) -> Part:
        header = _ascii(
            f"{TWO_HYPHENS}{self._boundary}{CRLF}"
            f"Content-Disposition: form-data; name=\"{item.form_field_name}\"; "
            f"filename=\"{item.hint_filename}\"{CRLF}"
            f"Content-Type: {item.mime_type}{CRLF}"
            f"{CRLF}"
        )
        try:
            size = item.size
        except OSError as e:
            logger.error(f"Cannot determine size of {item.path}: {e}")
            raise UploadItemReadError(
                f"Cannot access file {item.path}: {e}", item=item
            ) from e
        
        return Part(
            header=header,
            footer=_ascii(CRLF),
            payload_length=size,
            item=item
        )
    
    def _field_part(self, other_field: OtherField) -> Part:
        header = _ascii(
            f"{TWO_HYPHENS}{self._boundary}{CRLF}"
            f"Content-Disposition: form-data; name=\"{other_field.name}\"{CRLF}"
            f"{CRLF}"
        )
        value = other_field.value.encode('utf-8')
        return Part(
            header=header,
            footer=_ascii(CRLF),
            payload_length=len(value),
            value=value
        )
    
    @staticmethod
    def _normalize_fields(fields: FieldsArg) -> List[OtherField]:
        if fields is None:
            return []
        if isinstance(fields, Mapping):
            return [OtherField(name, value) for name, value in fields.items()]
        return list(fields)
