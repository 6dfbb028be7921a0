"""
Upload coordinator.

Orchestrates one upload: plan, connection settings, transmission.
Depends on injected collaborators so each step can be replaced in tests.
"""
from typing import Optional, Sequence

import aiohttp

from .models import UploadItem, UploadResult
from .protocols import UploadObserver
from .services import MultipartPlanBuilder
from .services.plan_service import FieldsArg
from .transmitter import StreamingTransmitter
from ..config import UploaderConfig
from ..logging import get_logger
from ..utils import format_size

logger = get_logger('httpsupload.upload')


class UploadCoordinator:
    """
    Coordinates the upload process.
    
    Uses dependency injection for all components, making it:
    - Testable (inject a session or transmitter)
    - Extensible (custom boundary or chunk size)
    
    Everything connection related (SSL context, session) is created per
    call, so concurrent uploads never share state.
    """
    
    def __init__(
        self,
        config: UploaderConfig,
        plan_builder: Optional[MultipartPlanBuilder] = None,
        transmitter: Optional[StreamingTransmitter] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize upload coordinator.
        
        Args:
            config: Uploader configuration
            plan_builder: Builds the multipart plan
            transmitter: Sends the plan
            session: Optional session to reuse. The coordinator never closes
                a session it did not create.
        """
        self._config = config
        self._plan_builder = plan_builder or MultipartPlanBuilder()
        self._transmitter = transmitter or StreamingTransmitter()
        self._session = session
    
    @property
    def config(self) -> UploaderConfig:
        return self._config
    
    async def upload(
        self,
        items: Sequence[UploadItem],
        fields: FieldsArg = None,
        observer: Optional[UploadObserver] = None
    ) -> UploadResult:
        """
        Execute the complete upload process.
        
        Args:
            items: Files and streams to upload, in order
            fields: Plain text form fields
            observer: Optional progress observer
            
        Returns:
            UploadResult
            
        Raises:
            UploadItemReadError: If an item cannot be read
            CertificateValidationError: If the server certificate is rejected
            TrustPolicyError: If the SSL context cannot be built
            UploadConnectionError: If the endpoint cannot be reached
        """
        config = self._config
        plan = self._plan_builder.build(items, fields)
        
        if plan.size_is_known:
            logger.info(
                f"Starting upload to {config.url}: {plan.item_count} item(s), "
                f"{format_size(plan.total_bytes)}"
            )
        else:
            logger.info(
                f"Starting upload to {config.url}: {plan.item_count} item(s), size unknown"
            )
        
        headers = config.build_headers(plan.boundary)
        request_kwargs = config.get_request_kwargs()
        request_kwargs['timeout'] = config.timeout.to_aiohttp_timeout()
        
        ssl_context = config.create_ssl_context()
        if ssl_context is not None:
            request_kwargs['ssl'] = ssl_context
            if not config.ssl.verify:
                logger.warning(f"Certificate validation disabled for {config.url}")
        
        session = self._session
        owns_session = session is None
        if owns_session:
            session = aiohttp.ClientSession()
        
        try:
            result = await self._transmitter.send(
                session,
                config.url,
                plan,
                headers,
                observer=observer,
                **request_kwargs
            )
        finally:
            if owns_session:
                await session.close()
                logger.debug("Upload session closed")
        
        if result.is_error:
            logger.warning(f"Upload to {config.url} failed: {result.status_text}")
        else:
            logger.info(f"Upload to {config.url} completed: {result.status_text}")
        return result
