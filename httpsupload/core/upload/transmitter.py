"""
Streaming transmitter.

Sends an UploadPlan as a single POST request. The body is produced lazily,
one chunk at a time, so memory use does not depend on item sizes.
"""
import asyncio
import time
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from .models import UploadPlan, UploadResult
from .protocols import UploadObserver
from .services import ProgressTracker, ResponseInterpreter, open_item
from ..exceptions import CertificateValidationError, UploadConnectionError
from ..logging import get_logger
from ..utils import format_size

logger = get_logger('httpsupload.upload.transmitter')

CHUNK_SIZE = 8192


class _MultipartBody:
    """
    Produces the request body of one plan.
    
    Remembers the first error raised while producing the body, because
    aiohttp reports it as a generic connection error.
    """
    
    def __init__(
        self,
        plan: UploadPlan,
        chunk_size: int,
        observer: Optional[UploadObserver] = None
    ):
        self._plan = plan
        self._chunk_size = chunk_size
        self._observer = observer
        self._stream: Optional[AsyncIterator[bytes]] = None
        self.error: Optional[BaseException] = None
        self.bytes_sent = 0
        
    def stream(self) -> AsyncIterator[bytes]:
        self._stream = self._generate()
        return self._stream
        
    async def close(self) -> None:
        """Close the generator so an interrupted item is released."""
        if self._stream is not None and not self._stream.ag_running:
            await self._stream.aclose()
            
    async def _generate(self) -> AsyncIterator[bytes]:
        # One generator only: aclose() has to reach the open item's context
        plan = self._plan
        observer = self._observer
        try:
            if observer is not None:
                observer.upload_start(plan.item_count, plan.total_data_bytes)
            start_time = time.monotonic()
            
            for part in plan.item_parts:
                yield part.header
                
                tracker = ProgressTracker.for_part(part, observer)
                logger.debug(
                    f"Sending item {part.item.hint_filename} "
                    f"as field '{part.item.form_field_name}'"
                )
                async with open_item(part.item) as reader:
                    tracker.start()
                    while True:
                        chunk = await reader.read(self._chunk_size)
                        if not chunk:
                            break
                        yield chunk
                        tracker.advance(len(chunk))
                    tracker.finish()
                self.bytes_sent += tracker.written
                
                yield part.footer
                
            for part in plan.field_parts:
                yield part.header
                yield part.value
                yield part.footer
                
            yield plan.closing
            
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.debug(
                f"Body sent: {format_size(self.bytes_sent)} of item data in {elapsed_ms} ms"
            )
            if observer is not None:
                observer.upload_end(self.bytes_sent, elapsed_ms)
        except Exception as e:
            self.error = e
            raise


class StreamingTransmitter:
    """
    Sends upload plans over an aiohttp session.
    
    Uses fixed-length framing (Content-Length) when the plan size is known
    and chunked transfer encoding otherwise. Items are sent strictly in
    order. There is exactly one attempt per call.
    
    Example:
        >>> transmitter = StreamingTransmitter()
        >>> async with aiohttp.ClientSession() as session:
        ...     result = await transmitter.send(session, url, plan, headers)
    """
    
    def __init__(
        self,
        chunk_size: int = CHUNK_SIZE,
        response_interpreter: Optional[ResponseInterpreter] = None
    ):
        """
        Initialize transmitter.
        
        Args:
            chunk_size: Bytes read from an item per write
            response_interpreter: Converts the reply into an UploadResult
        """
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self._chunk_size = chunk_size
        self._interpreter = response_interpreter or ResponseInterpreter()
        
    @property
    def chunk_size(self) -> int:
        return self._chunk_size
        
    async def send(
        self,
        session: aiohttp.ClientSession,
        url: str,
        plan: UploadPlan,
        headers: Dict[str, str],
        observer: Optional[UploadObserver] = None,
        **request_kwargs: Any
    ) -> UploadResult:
        """
        Send the plan and interpret the response.
        
        Args:
            session: Session to send the request with
            url: Endpoint URL
            plan: Plan to send
            headers: Request headers (Content-Length is managed here)
            observer: Optional progress observer
            **request_kwargs: Passed to session.post (ssl, proxy, timeout)
            
        Returns:
            UploadResult
            
        Raises:
            UploadItemReadError: If an item cannot be read
            CertificateValidationError: If the trust policy rejected the server
            UploadConnectionError: If the endpoint cannot be reached or the
                transfer fails
        """
        headers = {
            name: value for name, value in headers.items()
            if name.lower() != 'content-length'
        }
        if plan.size_is_known:
            headers['Content-Length'] = str(plan.total_bytes)
            logger.debug(f"Fixed-length request body: {plan.total_bytes} bytes")
        else:
            logger.debug("Request body size unknown, using chunked transfer encoding")
            
        body = _MultipartBody(plan, self._chunk_size, observer)
        try:
            async with session.post(
                url,
                data=body.stream(),
                headers=headers,
                **request_kwargs
            ) as response:
                result = await self._interpreter.interpret(response)
        except aiohttp.ClientConnectorCertificateError as e:
            certificate_error = e.certificate_error
            issuer = getattr(certificate_error, 'issuer', None)
            logger.error(f"Certificate validation failed for {url}: {certificate_error}")
            raise CertificateValidationError(str(certificate_error), issuer=issuer) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            if body.error is not None:
                raise body.error
            logger.error(f"Upload to {url} failed: {e!r}")
            raise UploadConnectionError(f"Upload to {url} failed: {e!r}") from e
        finally:
            await body.close()
            
        if body.error is not None:
            # Endpoint answered although the body was cut short
            raise body.error
            
        logger.debug(f"Upload finished with status {result.status_code}")
        return result
