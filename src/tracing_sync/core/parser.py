import logging
from dataclasses import dataclass

from tree_sitter import Node, Tree
from tree_sitter_language_pack import get_parser

from tracing_sync.core.errors import ParseFailureError
from tracing_sync.models import Position, Span

logger = logging.getLogger(__name__)

_EXCERPT_WIDTH = 40
_BYTE_ORDER_MARK = "\ufeff"


@dataclass(frozen=True)
class SourceFile:
    """Original text of one Rust file plus its syntax tree.

    Lines are split on ``\\n`` only, so a trailing ``\\r`` stays part of the line.
    A leading byte-order mark is held apart in ``byte_order_mark`` and is not
    part of ``text``, so it never shifts a column.
    """

    text: str
    source_bytes: bytes
    tree: Tree
    lines: tuple[str, ...]
    line_bytes: tuple[bytes, ...]
    byte_order_mark: str = ""

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def node_text(self, node: Node) -> str:
        return self.source_bytes[node.start_byte : node.end_byte].decode("utf-8")

    def char_column(self, point: tuple[int, int]) -> int:
        """Convert a tree-sitter byte column into a character column."""
        row, byte_column = point
        return len(self.line_bytes[row][:byte_column].decode("utf-8", errors="replace"))

    def position(self, point: tuple[int, int]) -> Position:
        return Position(line=point[0] + 1, column=self.char_column(point))

    def span(self, node: Node) -> Span:
        return Span(start=self.position(node.start_point), end=self.position(node.end_point))


def _decode(source: str | bytes) -> str:
    if isinstance(source, str):
        return source
    try:
        return source.decode("utf-8")
    except UnicodeDecodeError as exc:
        prefix = source[: exc.start]
        line = prefix.count(b"\n") + 1
        column = len(prefix) - (prefix.rfind(b"\n") + 1)
        raise ParseFailureError("source is not valid UTF-8", line, column) from None


def _first_error(root: Node) -> Node | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed([child for child in node.children if child.has_error or child.is_missing]))
    return None


def _describe_error(source: SourceFile, node: Node) -> str:
    if node.is_missing:
        return f"missing '{node.type}'"
    excerpt = source.node_text(node).strip().replace("\n", " ")
    if len(excerpt) > _EXCERPT_WIDTH:
        excerpt = excerpt[: _EXCERPT_WIDTH - 3] + "..."
    return f"unexpected '{excerpt}'" if excerpt else "unexpected end of input"


def parse_source(source: str | bytes) -> SourceFile:
    """Parse Rust source text, raising ``ParseFailureError`` if it is not syntactically valid."""
    text = _decode(source)
    byte_order_mark = _BYTE_ORDER_MARK if text.startswith(_BYTE_ORDER_MARK) else ""
    text = text[len(byte_order_mark) :]
    source_bytes = text.encode("utf-8")
    tree = get_parser("rust").parse(source_bytes)
    parsed = SourceFile(
        text=text,
        source_bytes=source_bytes,
        tree=tree,
        lines=tuple(text.split("\n")),
        line_bytes=tuple(source_bytes.split(b"\n")),
        byte_order_mark=byte_order_mark,
    )

    if tree.root_node.has_error:
        error_node = _first_error(tree.root_node) or tree.root_node
        position = parsed.position(error_node.start_point)
        message = _describe_error(parsed, error_node)
        logger.debug("Parse failed at %d:%d: %s", position.line, position.column, message)
        raise ParseFailureError(message, position.line, position.column)

    return parsed
