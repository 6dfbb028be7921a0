"""
Progress notification.

Turns bytes written for the current item into percentage events, at most
one per percentage value per item.
"""
from pathlib import Path
from typing import Optional, Tuple

from ..models import Part, UploadItem
from ..protocols import UploadObserver
from ...logging import get_logger
from ...utils import format_size

logger = get_logger('httpsupload.upload.progress')

# Baseline used for percentages of stream items, whose size is unknown.
# Percentages for such items are approximate.
STREAM_NOTIONAL_SIZE = 512 * 1024


def compute_percentage(written: int, total: int) -> int:
    """
    Percentage of total written, rounded down and clamped to 0-100.
    
    An empty total counts as complete.
    """
    if total <= 0:
        return 100
    return max(0, min(100, written * 100 // total))


def next_progress(written: int, total: int, last_pct: Optional[int]) -> Tuple[int, bool]:
    """
    Compute the next progress percentage.
    
    Args:
        written: Bytes written so far for the item
        total: Notional item size
        last_pct: Last percentage reported, None if nothing was reported
        
    Returns:
        Tuple of (percentage, whether it should be reported)
    """
    pct = compute_percentage(written, total)
    return pct, pct != last_pct


class ProgressTracker:
    """
    Tracks progress of one item and notifies an observer.
    
    Sequence of use: start(), advance() after every chunk, finish().
    Events are checked roughly once per 1% of the notional size, so items
    smaller than one chunk report exactly 0 and 100.
    """
    
    def __init__(
        self,
        item: UploadItem,
        notional_total: int,
        observer: Optional[UploadObserver] = None
    ):
        """
        Initialize tracker.
        
        Args:
            item: Item being uploaded
            notional_total: Size used as 100%
            observer: Optional observer to notify
        """
        self._item = item
        self._notional_total = notional_total
        self._observer = observer
        self._step = notional_total // 100
        self._written = 0
        self._last_checked = 0
        self._last_pct: Optional[int] = None
    
    @classmethod
    def for_part(cls, part: Part, observer: Optional[UploadObserver] = None) -> 'ProgressTracker':
        """Create a tracker for an item part of a plan."""
        if part.payload_length is None:
            notional_total = STREAM_NOTIONAL_SIZE
        else:
            notional_total = part.payload_length
        return cls(part.item, notional_total, observer)
    
    @property
    def written(self) -> int:
        return self._written
    
    @property
    def last_pct(self) -> Optional[int]:
        return self._last_pct
    
    def start(self) -> None:
        """Report 0% before the first chunk."""
        self._report(0)
    
    def advance(self, size: int) -> None:
        """Account for a chunk that has been written."""
        self._written += size
        if self._written - self._last_checked >= self._step:
            pct, should_emit = next_progress(
                self._written, self._notional_total, self._last_pct
            )
            if should_emit:
                self._notify(pct)
            self._last_checked = self._written
    
    def finish(self) -> None:
        """Report 100% after the last chunk."""
        self._report(100)
        logger.debug(f"{self._item.hint_filename}: {format_size(self._written)} sent")
    
    def _report(self, pct: int) -> None:
        if pct != self._last_pct:
            self._notify(pct)
    
    def _notify(self, pct: int) -> None:
        self._last_pct = pct
        if self._observer is not None:
            self._observer.upload_progress(self._item.file, self._item_size, pct)
    
    @property
    def _item_size(self) -> Optional[int]:
        if self._item.size_known:
            return self._notional_total
        return None


class LoggingObserver:
    """
    Observer writing progress to a logger.
    
    Example:
        >>> uploader = HttpsFileUploader(config)
        >>> await uploader.upload(items, observer=LoggingObserver())
    """
    
    def __init__(self, logger_name: str = 'httpsupload.upload.progress'):
        self._logger = get_logger(logger_name)
    
    def upload_start(self, item_count: int, total_bytes: int) -> None:
        self._logger.info(f"Uploading {item_count} item(s), {format_size(total_bytes)}")
    
    def upload_progress(self, file: Optional[Path], total_size: Optional[int], pct: int) -> None:
        name = file.name if file is not None else '<stream>'
        self._logger.info(f"{name}: {pct}%")
    
    def upload_end(self, bytes_sent: int, elapsed_ms: int) -> None:
        self._logger.info(f"Upload finished: {format_size(bytes_sent)} in {elapsed_ms} ms")
