"""Upload services module."""
from .item_service import FileItemReader, StreamItemReader, create_reader, open_item
from .plan_service import MultipartPlanBuilder, DEFAULT_BOUNDARY
from .progress_service import (
    ProgressTracker,
    LoggingObserver,
    compute_percentage,
    next_progress,
    STREAM_NOTIONAL_SIZE
)
from .response_service import ResponseInterpreter

__all__ = [
    'FileItemReader',
    'StreamItemReader',
    'create_reader',
    'open_item',
    'MultipartPlanBuilder',
    'DEFAULT_BOUNDARY',
    'ProgressTracker',
    'LoggingObserver',
    'compute_percentage',
    'next_progress',
    'STREAM_NOTIONAL_SIZE',
    'ResponseInterpreter',
]
