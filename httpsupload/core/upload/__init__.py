"""
Upload module for multipart/form-data uploads.

This module streams files and streams to an HTTP(S) endpoint with exact
Content-Length framing where possible, per-item progress events and
optional relaxed certificate validation.
"""
from .facade import HttpsFileUploader
from .coordinator import UploadCoordinator
from .transmitter import StreamingTransmitter, CHUNK_SIZE
from .models import (
    ItemKind,
    UploadItem,
    OtherField,
    Part,
    UploadPlan,
    UploadResult
)
from .services import (
    MultipartPlanBuilder,
    ResponseInterpreter,
    ProgressTracker,
    LoggingObserver,
    DEFAULT_BOUNDARY,
    STREAM_NOTIONAL_SIZE
)
from .protocols import UploadObserver, ItemReaderProtocol

__all__ = [
    # Main classes
    'HttpsFileUploader',
    'UploadCoordinator',
    'StreamingTransmitter',
    'MultipartPlanBuilder',
    'ResponseInterpreter',
    'ProgressTracker',
    'LoggingObserver',
    
    # Models
    'ItemKind',
    'UploadItem',
    'OtherField',
    'Part',
    'UploadPlan',
    'UploadResult',
    
    # Protocols
    'UploadObserver',
    'ItemReaderProtocol',
    
    # Constants
    'CHUNK_SIZE',
    'DEFAULT_BOUNDARY',
    'STREAM_NOTIONAL_SIZE',
]
