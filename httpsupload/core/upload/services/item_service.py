"""
Item reading services.

Opens the byte stream behind an UploadItem for exactly one pass and makes
sure it is closed again, on success or error.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
import inspect

import aiofiles

from ..models import ItemKind, UploadItem
from ..protocols import ItemReaderProtocol
from ...exceptions import UploadItemReadError
from ...logging import get_logger

logger = get_logger('httpsupload.upload.item')

# Delay between reads of a non-blocking stream that has no data ready
NOT_READY_POLL_INTERVAL = 0.01


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class FileItemReader:
    """
    Asynchronous file reader.
    
    Uses aiofiles for non-blocking I/O operations.
    """
    
    def __init__(self, item: UploadItem):
        self._item = item
        self._handle = None
    
    async def open(self) -> 'FileItemReader':
        """Open the file for reading."""
        try:
            self._handle = await aiofiles.open(self._item.path, 'rb')
        except OSError as e:
            logger.error(f"Failed to open {self._item.path}: {e}")
            raise UploadItemReadError(
                f"Cannot open file {self._item.path}: {e}", item=self._item
            ) from e
        logger.debug(f"Opened file {self._item.path}")
        return self
    
    async def read(self, size: int) -> bytes:
        try:
            return await self._handle.read(size)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {self._item.path}: {e}")
            raise UploadItemReadError(
                f"Cannot read file {self._item.path}: {e}", item=self._item
            ) from e
    
    async def close(self) -> None:
        if self._handle is not None:
            await self._handle.close()
            self._handle = None


class StreamItemReader:
    """
    Reader over a caller supplied stream.
    
    Accepts synchronous binary file objects (io.BytesIO, open(..., 'rb'),
    sys.stdin.buffer) as well as asynchronous ones such as aiofiles handles.
    """
    
    def __init__(self, item: UploadItem):
        self._item = item
        self._stream = item.stream
    
    async def open(self) -> 'StreamItemReader':
        return self
    
    async def read(self, size: int) -> bytes:
        data = await self._read_once(size)
        while data is None:
            # Non-blocking raw streams return None when no data is ready yet
            await asyncio.sleep(NOT_READY_POLL_INTERVAL)
            data = await self._read_once(size)
        
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise UploadItemReadError(
                f"Stream {self._item.hint_filename} must be opened in binary mode, "
                f"read() returned {type(data).__name__}",
                item=self._item
            )
        return bytes(data)
    
    async def _read_once(self, size: int) -> Any:
        try:
            return await _maybe_await(self._stream.read(size))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read stream {self._item.hint_filename}: {e}")
            raise UploadItemReadError(
                f"Cannot read stream {self._item.hint_filename}: {e}", item=self._item
            ) from e
    
    async def close(self) -> None:
        close = getattr(self._stream, 'close', None)
        if close is not None:
            await _maybe_await(close())


def create_reader(item: UploadItem) -> ItemReaderProtocol:
    """Create the reader matching the item's kind."""
    if item.kind is ItemKind.FILE:
        return FileItemReader(item)
    return StreamItemReader(item)


@asynccontextmanager
async def open_item(item: UploadItem) -> AsyncIterator[ItemReaderProtocol]:
    """
    Open an item's byte stream for the duration of the block.
    
    Example:
        >>> async with open_item(item) as reader:
        ...     chunk = await reader.read(8192)
    
    Raises:
        UploadItemReadError: If the item cannot be opened or read
    """
    reader = await create_reader(item).open()
    try:
        yield reader
    finally:
        await reader.close()
        logger.debug(f"Closed item {item.hint_filename}")
