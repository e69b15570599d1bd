import os
from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

AnnotationTemplate = Callable[[Sequence[str]], str]


class AnnotationStyle(StrEnum):
    TRACING = "tracing"
    LOG = "log"


_DEFAULT_NAMESPACES = {
    AnnotationStyle.TRACING: "tracing::",
    AnnotationStyle.LOG: "log_instrument::",
}

_ENV_FIELDS = {
    "TRACING_SYNC_NAMESPACE": "namespace",
    "TRACING_SYNC_STYLE": "style",
    "TRACING_SYNC_SKIP_MARKER": "skip_marker_name",
}


class SyncOptions(BaseModel):
    """Everything the core needs to recognise and render instrumentation annotations.

    Passed explicitly into every core call so that concurrent invocations on
    different files never share mutable state.
    """

    model_config = ConfigDict(frozen=True)

    marker_name: str = "instrument"
    skip_marker_name: str = "clippy_tracing_skip"
    exempt_names: frozenset[str] = frozenset({"test", "proof"})
    namespace: str | None = None
    style: AnnotationStyle = AnnotationStyle.TRACING
    annotation_template: AnnotationTemplate | None = None

    @field_validator("namespace")
    @classmethod
    def _validate_namespace(cls, value: str | None) -> str | None:
        if value and not value.endswith("::"):
            raise ValueError(f"Namespace must be empty or end with '::', got {value!r}")
        return value

    @property
    def resolved_namespace(self) -> str:
        if self.namespace is not None:
            return self.namespace
        return _DEFAULT_NAMESPACES[self.style]

    def render_annotation(self, arg_names: Sequence[str]) -> str:
        if self.annotation_template is not None:
            return self.annotation_template(arg_names)
        path = f"{self.resolved_namespace}{self.marker_name}"
        if self.style is AnnotationStyle.LOG:
            return f"#[{path}]"
        return f'#[{path}(level = "trace", skip({", ".join(arg_names)}))]'


def options_from_env(**overrides: Any) -> SyncOptions:
    """Build options from ``TRACING_SYNC_*`` environment variables; non-None overrides win."""
    values: dict[str, Any] = {}
    for env_name, field_name in _ENV_FIELDS.items():
        env_value = os.getenv(env_name)
        if env_value is not None:
            values[field_name] = env_value
    values.update({key: value for key, value in overrides.items() if value is not None})
    return SyncOptions(**values)
