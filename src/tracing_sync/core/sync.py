import logging

from tracing_sync.core.editor import EditPlan
from tracing_sync.core.options import SyncOptions
from tracing_sync.core.parser import parse_source
from tracing_sync.core.walker import find_missing, plan_fix, plan_strip
from tracing_sync.models import Action, CheckOutcome

logger = logging.getLogger(__name__)


def check_source(source: str | bytes, options: SyncOptions | None = None) -> CheckOutcome:
    """Report the first function lacking instrumentation, in depth-first declaration order."""
    options = options or SyncOptions()
    parsed = parse_source(source)
    missing = find_missing(parsed, options)
    if not missing:
        return CheckOutcome()
    logger.debug("%d function(s) missing instrumentation", len(missing))
    return CheckOutcome(missing_at=missing[0].span.start)


def fix_source(source: str | bytes, options: SyncOptions | None = None) -> str:
    """Return ``source`` with an annotation line inserted before every eligible function."""
    options = options or SyncOptions()
    parsed = parse_source(source)
    plan = EditPlan(parsed.lines)
    plan_fix(parsed, options, plan)
    return parsed.byte_order_mark + plan.render()


def strip_source(source: str | bytes, options: SyncOptions | None = None) -> str:
    """Return ``source`` with every instrumentation annotation on a function removed."""
    options = options or SyncOptions()
    parsed = parse_source(source)
    plan = EditPlan(parsed.lines)
    plan_strip(parsed, options, plan)
    return parsed.byte_order_mark + plan.render()


def process(action: Action, source: str | bytes, options: SyncOptions | None = None) -> CheckOutcome | str:
    """Run ``action`` on the text of one file.

    Pure and free of shared state, so distinct files may be processed
    concurrently. Raises ``ParseFailureError`` for malformed source.
    """
    if action == Action.CHECK:
        return check_source(source, options)
    if action == Action.FIX:
        return fix_source(source, options)
    return strip_source(source, options)
