"""
Response interpretation.

Converts the endpoint's reply into an UploadResult. Any status code is a
valid result; deciding what is an error is left to UploadResult.is_error.
"""
from http import HTTPStatus
from typing import Optional

import aiohttp

from ..models import UploadResult
from ...logging import get_logger
from ...utils import status_text

logger = get_logger('httpsupload.upload.response')


class ResponseInterpreter:
    """Reads status and body of an upload response."""
    
    async def interpret(self, response: aiohttp.ClientResponse) -> UploadResult:
        """
        Build the result for a response.
        
        The body is not read for 401 Unauthorized.
        
        Args:
            response: Response of the upload request
            
        Returns:
            UploadResult
        """
        status = response.status
        logger.debug(f"Endpoint answered {status_text(status)}")
        
        if status == HTTPStatus.UNAUTHORIZED:
            logger.warning("Endpoint rejected the credentials (401 Unauthorized)")
            return UploadResult(status_code=status, response_text=None)
        
        body = await self._read_body(response)
        return UploadResult(status_code=status, response_text=self._join_lines(body))
    
    async def _read_body(self, response: aiohttp.ClientResponse) -> str:
        try:
            return await response.text()
        except (UnicodeDecodeError, LookupError) as e:
            # Wrong or unknown charset; the body is already buffered
            logger.debug(f"Cannot decode response as declared, using replacement: {e}")
            raw = await response.read()
            return raw.decode('utf-8', errors='replace')
    
    @staticmethod
    def _join_lines(body: str) -> Optional[str]:
        lines = body.splitlines()
        if not lines:
            return None
        return '\n'.join(lines)
