from tracing_sync.core.errors import EditConflictError, EditRangeError, ParseFailureError, TracingSyncError
from tracing_sync.core.options import AnnotationStyle, SyncOptions, options_from_env
from tracing_sync.core.sync import check_source, fix_source, process, strip_source

__all__ = [
    "AnnotationStyle",
    "EditConflictError",
    "EditRangeError",
    "ParseFailureError",
    "SyncOptions",
    "TracingSyncError",
    "check_source",
    "fix_source",
    "options_from_env",
    "process",
    "strip_source",
]
