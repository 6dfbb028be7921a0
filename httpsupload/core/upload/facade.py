"""
Upload facade.

Provides a simplified interface for multipart uploads.
Follows Facade Pattern - hides plan building, SSL setup and transmission.
"""
import asyncio
from pathlib import Path
from typing import Optional, Sequence, Union

from .coordinator import UploadCoordinator
from .models import UploadItem, UploadResult
from .protocols import UploadObserver
from .services import MultipartPlanBuilder, DEFAULT_BOUNDARY
from .services.plan_service import FieldsArg
from .transmitter import StreamingTransmitter, CHUNK_SIZE
from ..config import UploaderConfig


class HttpsFileUploader:
    """
    Uploads files and streams to an HTTP(S) endpoint as multipart/form-data.
    
    Files are streamed from disk and never held in memory, so very large
    files can be uploaded. The result must be checked with is_error: only
    connectivity, certificate and read problems raise.
    
    Example:
        >>> config = UploaderConfig.insecure("https://example.com/upload")
        >>> uploader = HttpsFileUploader(config)
        >>> result = await uploader.upload(
        ...     [UploadItem.from_file("hugefile.zip")],
        ...     {"email": "johnny@company.com"},
        ...     observer=LoggingObserver()
        ... )
        >>> if result.is_error:
        ...     print(f"Upload failed: {result.status_text}")
        ...     print(result.response_text_no_html)
    """
    
    def __init__(
        self,
        config: UploaderConfig,
        boundary: str = DEFAULT_BOUNDARY,
        chunk_size: int = CHUNK_SIZE
    ):
        """
        Initialize uploader.
        
        Args:
            config: Uploader configuration
            boundary: Multipart boundary token
            chunk_size: Bytes sent per write
        """
        self._coordinator = UploadCoordinator(
            config=config,
            plan_builder=MultipartPlanBuilder(boundary),
            transmitter=StreamingTransmitter(chunk_size)
        )
    
    @property
    def config(self) -> UploaderConfig:
        return self._coordinator.config
    
    async def upload(
        self,
        items: Sequence[UploadItem],
        fields: FieldsArg = None,
        observer: Optional[UploadObserver] = None
    ) -> UploadResult:
        """
        Upload items and form fields in one request.
        
        Args:
            items: Files or streams, uploaded in this order
            fields: Other form fields (name to plain text value)
            observer: Optional progress observer
            
        Returns:
            UploadResult
        """
        return await self._coordinator.upload(items, fields, observer)
    
    async def upload_file(self, file_path: Union[str, Path]) -> UploadResult:
        """
        Upload a single file into the form field "file".
        
        Args:
            file_path: File to upload
            
        Returns:
            UploadResult
        """
        return await self.upload([UploadItem.from_file(file_path)])
    
    def upload_sync(
        self,
        items: Sequence[UploadItem],
        fields: FieldsArg = None,
        observer: Optional[UploadObserver] = None
    ) -> UploadResult:
        """
        Blocking version of upload().
        
        Must not be called from a running event loop; run it in its own
        thread if needed.
        """
        return asyncio.run(self.upload(items, fields, observer))
