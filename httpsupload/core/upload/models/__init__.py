"""Upload models."""
from .upload_models import (
    ItemKind,
    UploadItem,
    OtherField,
    Part,
    UploadPlan,
    UploadResult,
    guess_mime_type
)

__all__ = [
    'ItemKind',
    'UploadItem',
    'OtherField',
    'Part',
    'UploadPlan',
    'UploadResult',
    'guess_mime_type',
]
