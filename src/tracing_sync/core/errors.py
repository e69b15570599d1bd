class TracingSyncError(Exception):
    """Base class for every error raised by the synchronizer core."""


class ParseFailureError(TracingSyncError):
    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{line}:{column}: {message}")
        self.message = message
        self.line = line
        self.column = column


class EditConflictError(TracingSyncError):
    """Two planned edits target the same slot or overlapping text of one line."""


class EditRangeError(TracingSyncError, IndexError):
    pass
