from enum import Enum

from tree_sitter import Node

from tracing_sync.core.options import SyncOptions
from tracing_sync.core.parser import SourceFile
from tracing_sync.models import AnnotationState, Span

# Comments may sit between a function and its outer attributes.
_ATTRIBUTE_RUN_TYPES = frozenset({"attribute_item", "line_comment", "block_comment"})


class AttributeForm(Enum):
    PATH = "path"  # #[name]
    LIST = "list"  # #[name(...)]
    NAME_VALUE = "name_value"  # #[name = value]


def function_attributes(node: Node) -> list[Node]:
    """Return the outer ``attribute_item`` nodes attached to ``node``, in source order."""
    attributes: list[Node] = []
    sibling = node.prev_named_sibling
    while sibling is not None and sibling.type in _ATTRIBUTE_RUN_TYPES:
        if sibling.type == "attribute_item":
            attributes.append(sibling)
        sibling = sibling.prev_named_sibling
    attributes.reverse()
    return attributes


def _final_segment(source: SourceFile, path: Node) -> str:
    if path.type == "scoped_identifier":
        name = path.child_by_field_name("name")
        return source.node_text(name) if name is not None else ""
    return source.node_text(path)


def read_attribute(source: SourceFile, item: Node) -> tuple[str, AttributeForm] | None:
    """Return the final path segment and the form of an ``attribute_item``."""
    attribute = next((child for child in item.named_children if child.type == "attribute"), None)
    if attribute is None or not attribute.named_children:
        return None

    name = _final_segment(source, attribute.named_children[0])
    if attribute.child_by_field_name("value") is not None:
        return name, AttributeForm.NAME_VALUE
    if attribute.child_by_field_name("arguments") is not None:
        return name, AttributeForm.LIST
    return name, AttributeForm.PATH


def is_const_function(node: Node) -> bool:
    for child in node.children:
        if child.type == "function_modifiers":
            return any(modifier.type == "const" for modifier in child.children)
    return False


def classify_function(source: SourceFile, node: Node, options: SyncOptions) -> AnnotationState:
    """Classify a ``function_item`` by its attributes.

    The three flags are evaluated independently of each other. A ``const fn``
    is always exempt since it cannot carry runtime instrumentation.
    """
    instrumented = skipped = exempt = False
    annotation_span: Span | None = None

    for item in function_attributes(node):
        attribute = read_attribute(source, item)
        if attribute is None:
            continue
        name, form = attribute
        marker_form = form in (AttributeForm.PATH, AttributeForm.LIST)

        if marker_form and name == options.marker_name:
            instrumented = True
            if annotation_span is None:
                annotation_span = source.span(item)
        if form is AttributeForm.PATH and name in options.exempt_names:
            exempt = True
        if marker_form and name == options.skip_marker_name:
            skipped = True

    if is_const_function(node):
        exempt = True

    return AnnotationState(
        instrumented=instrumented,
        skipped=skipped,
        exempt=exempt,
        annotation_span=annotation_span,
    )
