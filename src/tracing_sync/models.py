from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Action(StrEnum):
    CHECK = "check"
    FIX = "fix"
    STRIP = "strip"


class Position(BaseModel):
    """A 1-based line and 0-based character column."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int


class Span(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


class AnnotationState(BaseModel):
    """Classification of a single function's attribute list."""

    model_config = ConfigDict(frozen=True)

    instrumented: bool = False
    skipped: bool = False
    exempt: bool = False
    annotation_span: Span | None = None

    @property
    def eligible(self) -> bool:
        return not (self.instrumented or self.skipped or self.exempt)


class CheckOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    missing_at: Position | None = None

    @property
    def is_clean(self) -> bool:
        return self.missing_at is None
