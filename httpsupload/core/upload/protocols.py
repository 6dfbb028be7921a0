"""
Protocol definitions for upload module.

Defines the interfaces callers implement (progress observers) and the ones
the transmitter depends on (item readers).
"""
from pathlib import Path
from typing import Optional, Protocol


class UploadObserver(Protocol):
    """
    Protocol for upload progress observers.
    
    All callbacks are invoked on the task performing the upload and should
    return quickly.
    """
    
    def upload_start(self, item_count: int, total_bytes: int) -> None:
        """
        Called before the first byte is sent.
        
        Args:
            item_count: Number of items (files and streams) to upload
            total_bytes: Total size of all items, items of unknown size
                counted as 0
        """
        ...
    
    def upload_progress(self, file: Optional[Path], total_size: Optional[int], pct: int) -> None:
        """
        Called when the percentage uploaded of the current item changes.
        
        Each item reports 0 first and 100 last, and never the same
        percentage twice.
        
        Args:
            file: File being uploaded, None for stream items
            total_size: Item size in bytes, None if unknown
            pct: Percentage of the item uploaded (0-100)
        """
        ...
    
    def upload_end(self, bytes_sent: int, elapsed_ms: int) -> None:
        """
        Called after the whole request body has been produced.
        
        Args:
            bytes_sent: Item bytes actually sent, across all items
            elapsed_ms: Milliseconds spent sending
        """
        ...


class ItemReaderProtocol(Protocol):
    """Protocol for reading an upload item's bytes."""
    
    async def read(self, size: int) -> bytes:
        """
        Read up to size bytes.
        
        Returns:
            Data read, empty bytes at end of stream
        """
        ...
    
    async def close(self) -> None:
        """Release the underlying resource."""
        ...
