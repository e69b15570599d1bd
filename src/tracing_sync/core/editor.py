"""Line-indexed text editing.

Every edit is addressed by the zero-based index of an *original* physical
line, and edits inside a line by that line's *original* character columns,
so planning an edit never shifts the coordinates of another one. The final
text is produced in a separate pass by :meth:`EditPlan.render`.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from tracing_sync.core.errors import EditConflictError, EditRangeError
from tracing_sync.models import Span

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineEdit:
    """Replace columns ``start`` to ``end`` (exclusive) of one line with ``text``."""

    start: int
    end: int
    text: str = ""

    def overlaps(self, other: "LineEdit") -> bool:
        return self.start == other.start or (self.start < other.end and other.start < self.end)


@dataclass
class LineRecord:
    content: str
    insertion: str | None = None
    removed: bool = False
    edits: list[LineEdit] = field(default_factory=list)

    @property
    def line_end(self) -> int:
        """Column where the content stops, ahead of a carriage return."""
        return len(self.content) - 1 if self.content.endswith("\r") else len(self.content)

    def rendered(self) -> str:
        text = self.content
        for edit in sorted(self.edits, key=lambda e: e.start, reverse=True):
            text = text[: edit.start] + edit.text + text[edit.end :]
        return text


class EditPlan:
    def __init__(self, lines: Sequence[str]) -> None:
        self._records = [LineRecord(content=line) for line in lines]

    @classmethod
    def from_text(cls, text: str) -> "EditPlan":
        return cls(text.split("\n"))

    def __len__(self) -> int:
        return len(self._records)

    @property
    def has_edits(self) -> bool:
        return any(r.insertion is not None or r.removed or r.edits for r in self._records)

    def _record(self, index: int) -> LineRecord:
        if not 0 <= index < len(self._records):
            raise EditRangeError(f"Line index {index} is outside the file (0..{len(self._records) - 1})")
        return self._records[index]

    def set_before(self, index: int, text: str) -> None:
        """Place ``text`` on its own line(s) immediately before original line ``index``."""
        record = self._record(index)
        if record.insertion is not None:
            raise EditConflictError(f"Insertion slot before line {index + 1} is already taken")
        record.insertion = text

    def insert_at_indent(self, index: int, column: int, text: str) -> None:
        """Insert ``text`` ahead of the code at ``column`` of line ``index``.

        When only whitespace precedes ``column`` the text goes on a line of its
        own, indented with that whitespace. Otherwise it is spliced into the
        line followed by a single space.
        """
        prefix = self._record(index).content[:column]
        if not prefix.strip():
            self.set_before(index, prefix + text)
            return
        logger.debug("Splicing inline annotation at %d:%d", index + 1, column)
        self.splice(index, column, text + " ")

    def splice(self, index: int, column: int, text: str) -> None:
        """Insert ``text`` at original ``column`` of line ``index``."""
        self._edit(index, LineEdit(start=column, end=column, text=text))

    def _edit(self, index: int, edit: LineEdit) -> None:
        record = self._record(index)
        if not 0 <= edit.start <= edit.end <= len(record.content):
            raise EditRangeError(f"Columns {edit.start}..{edit.end} are outside line {index + 1}")
        if record.removed or any(edit.overlaps(other) for other in record.edits):
            raise EditConflictError(f"Columns {edit.start}..{edit.end} of line {index + 1} are already being edited")
        record.edits.append(edit)

    def remove_lines(self, start: int, end: int) -> None:
        """Drop original lines ``start`` through ``end`` (inclusive) from the output."""
        if start > end:
            raise EditRangeError(f"Empty line range {start}..{end}")
        records = [self._record(index) for index in range(start, end + 1)]
        for index, record in zip(range(start, end + 1), records, strict=True):
            if record.removed or record.edits:
                raise EditConflictError(f"Line {index + 1} is already being edited")
        for record in records:
            record.removed = True

    def remove_span(self, span: Span) -> None:
        """Remove the text covered by ``span`` (1-based lines, character columns).

        Lines holding nothing but the span disappear entirely. When other code
        shares the first or last line, only the spanned text is cut out,
        together with the whitespace that follows it.
        """
        first, last = span.start.line - 1, span.end.line - 1
        first_record, last_record = self._record(first), self._record(last)
        head = first_record.content[: span.start.column]
        tail = last_record.content[span.end.column :]

        if not head.strip() and not tail.strip():
            self.remove_lines(first, last)
            return

        logger.debug("Cutting inline annotation at %d:%d", span.start.line, span.start.column)
        cut_end = span.end.column + len(tail) - len(tail.lstrip())
        if first == last:
            if tail.strip():
                self._edit(first, LineEdit(start=span.start.column, end=cut_end))
            else:
                self._edit(first, LineEdit(start=len(head.rstrip()), end=first_record.line_end))
            return

        if not head.strip():
            # Spanned lines collapse onto the last one, keeping the first line's indentation.
            self._edit(last, LineEdit(start=0, end=cut_end, text=head))
            self.remove_lines(first, last - 1)
            return

        self._edit(first, LineEdit(start=len(head.rstrip()), end=first_record.line_end))
        if last - first > 1:
            self.remove_lines(first + 1, last - 1)
        if tail.strip():
            self._edit(last, LineEdit(start=0, end=cut_end))
        else:
            self.remove_lines(last, last)

    def _line_terminator(self, index: int) -> str:
        # The final line has no terminator of its own; follow the line before it.
        if index == len(self._records) - 1 and index > 0:
            index -= 1
        return "\r" if self._records[index].content.endswith("\r") else ""

    def render(self) -> str:
        segments: list[str] = []
        for index, record in enumerate(self._records):
            if record.insertion is not None:
                segments.append(record.insertion + self._line_terminator(index))
            if not record.removed:
                segments.append(record.rendered())
        return "\n".join(segments)
