"""
httpsupload - Streaming multipart/form-data uploads over HTTP(S).

Usage:
    >>> from httpsupload import HttpsFileUploader, UploaderConfig, UploadItem
    >>> 
    >>> uploader = HttpsFileUploader(UploaderConfig("https://example.com/upload"))
    >>> result = uploader.upload_sync([UploadItem.from_file("hugefile.zip")])
    >>> result.is_error
    False
"""
from .core.config import UploaderConfig, ProxyConfig, SSLConfig, TimeoutConfig
from .core.exceptions import (
    HttpsUploadError,
    UploadConnectionError,
    UploadItemReadError,
    CertificateValidationError,
    TrustPolicyError
)
from .core.logging import get_logger, setup_logging
from .core.tls import TrustPolicy, TrustDecision, build_trust_policy
from .core.upload import (
    HttpsFileUploader,
    UploadCoordinator,
    StreamingTransmitter,
    MultipartPlanBuilder,
    LoggingObserver,
    UploadObserver,
    ItemKind,
    UploadItem,
    OtherField,
    UploadPlan,
    UploadResult
)

__version__ = '1.0.0'

__all__ = [
    'HttpsFileUploader',
    'UploadCoordinator',
    'StreamingTransmitter',
    'MultipartPlanBuilder',
    'LoggingObserver',
    'UploadObserver',
    'ItemKind',
    'UploadItem',
    'OtherField',
    'UploadPlan',
    'UploadResult',
    'UploaderConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'TrustPolicy',
    'TrustDecision',
    'build_trust_policy',
    'HttpsUploadError',
    'UploadConnectionError',
    'UploadItemReadError',
    'CertificateValidationError',
    'TrustPolicyError',
    'get_logger',
    'setup_logging',
]
