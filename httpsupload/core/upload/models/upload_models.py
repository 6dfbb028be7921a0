"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple, Union
import mimetypes

from ...utils import strip_html, status_text

DEFAULT_FORM_FIELD = 'file'
DEFAULT_MIME_TYPE = 'application/octet-stream'

HTTP_OK = 200


def guess_mime_type(filename: str) -> str:
    """Guess a MIME type from a file name, falling back to octet-stream."""
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_MIME_TYPE


class ItemKind(Enum):
    """Where the bytes of an upload item come from."""
    FILE = 'file'
    STREAM = 'stream'


@dataclass(frozen=True)
class UploadItem:
    """
    A file or stream to upload as one multipart part.
    
    Use the from_file() and from_stream() constructors rather than building
    the dataclass directly.
    
    Attributes:
        kind: ItemKind.FILE or ItemKind.STREAM
        hint_filename: File name sent in the Content-Disposition header
        mime_type: Content-Type of the part
        form_field_name: Name of the form field the item is posted to
        path: File to read (FILE items)
        stream: Binary reader to consume (STREAM items). Its read(n) may be
            a plain method or a coroutine.
    
    Example:
        >>> items = [
        ...     UploadItem.from_file("report.pdf"),
        ...     UploadItem.from_stream(io.BytesIO(data), "data.bin"),
        ... ]
    """
    kind: ItemKind
    hint_filename: str
    mime_type: str
    form_field_name: str = DEFAULT_FORM_FIELD
    path: Optional[Path] = None
    stream: Any = field(default=None, compare=False, repr=False)
    
    def __post_init__(self):
        if self.kind is ItemKind.FILE and self.path is None:
            raise ValueError("File item requires a path")
        if self.kind is ItemKind.STREAM and self.stream is None:
            raise ValueError("Stream item requires a stream")
    
    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        hint_filename: Optional[str] = None,
        mime_type: Optional[str] = None,
        form_field_name: str = DEFAULT_FORM_FIELD
    ) -> 'UploadItem':
        """
        Create an item backed by a file.
        
        Args:
            path: File to upload
            hint_filename: File name to announce (defaults to the file's name)
            mime_type: MIME type (guessed from the file name if omitted)
            form_field_name: Form field name
        """
        path = Path(path)
        return cls(
            kind=ItemKind.FILE,
            hint_filename=hint_filename or path.name,
            mime_type=mime_type or guess_mime_type(path.name),
            form_field_name=form_field_name,
            path=path
        )
    
    @classmethod
    def from_stream(
        cls,
        stream: Any,
        hint_filename: str,
        mime_type: Optional[str] = None,
        form_field_name: str = DEFAULT_FORM_FIELD
    ) -> 'UploadItem':
        """
        Create an item backed by an already open binary stream.
        
        The size is unknown in advance, so a request containing stream items
        is sent with chunked transfer encoding. The stream is closed once it
        has been uploaded.
        
        Args:
            stream: Binary reader
            hint_filename: File name to announce
            mime_type: MIME type (guessed from hint_filename if omitted)
            form_field_name: Form field name
        """
        return cls(
            kind=ItemKind.STREAM,
            hint_filename=hint_filename,
            mime_type=mime_type or guess_mime_type(hint_filename),
            form_field_name=form_field_name,
            stream=stream
        )
    
    @property
    def size(self) -> Optional[int]:
        """Returns size in bytes, or None if unknown."""
        if self.kind is ItemKind.FILE:
            return self.path.stat().st_size
        return None
    
    @property
    def size_known(self) -> bool:
        return self.kind is ItemKind.FILE
    
    @property
    def file(self) -> Optional[Path]:
        """Returns the backing file, None for stream items."""
        return self.path if self.kind is ItemKind.FILE else None


@dataclass(frozen=True)
class OtherField:
    """
    A plain text form field posted along with the items.
    
    A value of None is sent as an empty string.
    """
    name: str
    value: Optional[str] = ''
    
    def __post_init__(self):
        if self.value is None:
            object.__setattr__(self, 'value', '')


@dataclass(frozen=True)
class Part:
    """
    One multipart part with precomputed framing.
    
    Attributes:
        header: Boundary line and part headers, including the blank line
        footer: Line break closing the part
        payload_length: Payload size in bytes, None if unknown
        item: Item supplying the payload (item parts)
        value: Encoded field value (field parts)
    """
    header: bytes
    footer: bytes
    payload_length: Optional[int]
    item: Optional[UploadItem] = None
    value: bytes = b''
    
    @property
    def length(self) -> int:
        """Returns part size in bytes, counting an unknown payload as 0."""
        return len(self.header) + (self.payload_length or 0) + len(self.footer)
    
    @property
    def is_item(self) -> bool:
        return self.item is not None


@dataclass(frozen=True)
class UploadPlan:
    """
    Ordered multipart parts of one request.
    
    Attributes:
        boundary: Multipart boundary token
        item_parts: Item parts in caller order
        field_parts: Field parts in iteration order
        closing: Closing boundary written after all parts
        total_bytes: Exact body length (only meaningful if size_is_known)
        size_is_known: True if every item has a known size
    """
    boundary: str
    item_parts: Tuple[Part, ...]
    field_parts: Tuple[Part, ...]
    closing: bytes
    total_bytes: int
    size_is_known: bool
    
    @property
    def parts(self) -> Tuple[Part, ...]:
        """Returns all parts in wire order (closing boundary excluded)."""
        return self.item_parts + self.field_parts
    
    @property
    def item_count(self) -> int:
        return len(self.item_parts)
    
    @property
    def total_data_bytes(self) -> int:
        """Returns total item payload size, unknown sizes counted as 0."""
        return sum(part.payload_length or 0 for part in self.item_parts)


@dataclass(frozen=True)
class UploadResult:
    """
    Result of an upload.
    
    Attributes:
        status_code: HTTP status returned by the endpoint
        response_text: Response body, None if there was none or the
            endpoint answered 401 Unauthorized
    """
    status_code: int
    response_text: Optional[str] = None
    
    @property
    def is_error(self) -> bool:
        """
        Returns True unless the endpoint answered 200 OK.
        
        Other 2xx codes such as 201 Created are reported as errors too.
        """
        return self.status_code != HTTP_OK
    
    @property
    def response_text_no_html(self) -> Optional[str]:
        """Returns response text with HTML markup removed."""
        return strip_html(self.response_text)
    
    @property
    def status_text(self) -> str:
        """Returns status code with its reason phrase, e.g. '404 Not Found'."""
        return status_text(self.status_code)
