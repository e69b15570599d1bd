import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from tree_sitter import Node

from tracing_sync.core.attributes import classify_function, function_attributes
from tracing_sync.core.editor import EditPlan
from tracing_sync.core.options import SyncOptions
from tracing_sync.core.parser import SourceFile
from tracing_sync.core.signature import excluded_argument_names
from tracing_sync.models import AnnotationState, Span

logger = logging.getLogger(__name__)


class ItemKind(Enum):
    FREE_FUNCTION = "free_function"
    ASSOCIATED_FUNCTION = "associated_function"
    MODULE = "module"
    OTHER = "other"


_FUNCTION_KINDS = (ItemKind.FREE_FUNCTION, ItemKind.ASSOCIATED_FUNCTION)


@dataclass(frozen=True)
class FunctionVisit:
    node: Node
    kind: ItemKind
    state: AnnotationState
    span: Span


def item_kind(node: Node) -> ItemKind:
    if node.type == "mod_item":
        return ItemKind.MODULE
    if node.type != "function_item":
        return ItemKind.OTHER

    parent = node.parent
    owner = parent.parent if parent is not None and parent.type == "declaration_list" else None
    if owner is not None and owner.type == "impl_item":
        return ItemKind.ASSOCIATED_FUNCTION
    if owner is not None and owner.type == "trait_item":
        # Default trait methods are searched for nested items but never classified.
        return ItemKind.OTHER
    return ItemKind.FREE_FUNCTION


def walk_functions(
    source: SourceFile,
    options: SyncOptions,
    on_function: Callable[[FunctionVisit], bool],
) -> int:
    """Visit every free and associated function in depth-first declaration order.

    ``on_function`` returns whether the function's body should be searched for
    nested functions. Returns the number of functions visited.
    """
    visited = 0
    stack: list[Node] = [source.root]
    while stack:
        node = stack.pop()
        kind = item_kind(node)

        if kind in _FUNCTION_KINDS:
            visited += 1
            visit = FunctionVisit(
                node=node,
                kind=kind,
                state=classify_function(source, node, options),
                span=source.span(node),
            )
            body = node.child_by_field_name("body")
            if on_function(visit) and body is not None:
                stack.append(body)
            continue

        stack.extend(reversed(node.children))
    return visited


def find_missing(source: SourceFile, options: SyncOptions) -> list[FunctionVisit]:
    """Return every eligible function; bodies of eligible functions are not searched."""
    missing: list[FunctionVisit] = []

    def _check(visit: FunctionVisit) -> bool:
        if visit.state.eligible:
            missing.append(visit)
            return False
        return True

    walk_functions(source, options, _check)
    return missing


def _insertion_anchor(source: SourceFile, node: Node) -> tuple[int, int]:
    row = node.start_point[0]
    column = source.char_column(node.start_point)
    for attribute in function_attributes(node):
        if attribute.start_point[0] == row:
            column = min(column, source.char_column(attribute.start_point))
            break
    return row, column


def plan_fix(source: SourceFile, options: SyncOptions, plan: EditPlan) -> int:
    """Plan an annotation line before every eligible function. Returns the number of insertions."""
    inserted = 0

    def _fix(visit: FunctionVisit) -> bool:
        nonlocal inserted
        if visit.state.eligible:
            row, column = _insertion_anchor(source, visit.node)
            annotation = options.render_annotation(excluded_argument_names(source, visit.node))
            plan.insert_at_indent(row, column, annotation)
            inserted += 1
        return True

    visited = walk_functions(source, options, _fix)
    logger.debug("Planned %d annotation(s) across %d function(s)", inserted, visited)
    return inserted


def plan_strip(source: SourceFile, options: SyncOptions, plan: EditPlan) -> int:
    """Plan removal of the instrumentation annotation of every instrumented function."""
    removed = 0

    def _strip(visit: FunctionVisit) -> bool:
        nonlocal removed
        if visit.state.instrumented and visit.state.annotation_span is not None:
            plan.remove_span(visit.state.annotation_span)
            removed += 1
        return True

    visited = walk_functions(source, options, _strip)
    logger.debug("Planned removal of %d annotation(s) across %d function(s)", removed, visited)
    return removed
