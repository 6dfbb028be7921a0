"""
Custom exceptions for multipart upload operations.

Only connectivity, certificate and item read problems are raised. A non-200
reply from the endpoint is reported through UploadResult, not an exception.
"""
from typing import Optional, Any


class HttpsUploadError(Exception):
    """Base exception for all upload errors."""
    
    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class UploadConnectionError(HttpsUploadError):
    """Exception raised when the endpoint cannot be reached or the transfer breaks."""
    pass


class UploadItemReadError(HttpsUploadError):
    """Exception raised when an upload item cannot be opened or read."""
    
    def __init__(
        self,
        message: str,
        item: Any = None,
        error_code: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            item: The UploadItem that failed (if available)
            error_code: Numeric error code (if available)
        """
        self.item = item
        super().__init__(message, error_code)


class CertificateValidationError(HttpsUploadError):
    """Exception raised when the server certificate is rejected by the trust policy."""
    
    def __init__(
        self,
        message: str,
        issuer: Optional[str] = None,
        error_code: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            issuer: Issuer Organization of the rejected certificate (if known)
            error_code: Numeric error code (if available)
        """
        self.issuer = issuer
        super().__init__(message, error_code)


class TrustPolicyError(HttpsUploadError):
    """Exception raised when an SSL context for the trust policy cannot be built."""
    pass
