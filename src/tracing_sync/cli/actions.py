import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from tracing_sync.core.errors import TracingSyncError
from tracing_sync.core.files import iter_rust_files
from tracing_sync.core.options import AnnotationStyle, SyncOptions, options_from_env
from tracing_sync.core.sync import process
from tracing_sync.models import Action, CheckOutcome

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)

_EXIT_ERROR = 1
_EXIT_MISSING = 2

PathOption = Annotated[Path, typer.Option(help="File or directory to work in.")]
TextOption = Annotated[
    str | None, typer.Option(help="Apply to this source text instead of files; results go to stdout.")
]
ExcludeOption = Annotated[
    list[str] | None,
    typer.Option(help="Comma-separated substrings; paths containing any of them are skipped."),
]
NamespaceOption = Annotated[
    str | None,
    typer.Option("--namespace", "--suffix", help="Path prefix of inserted annotations, e.g. 'tracing::'."),
]
StyleOption = Annotated[AnnotationStyle | None, typer.Option(help="Annotation style to insert.")]
SkipMarkerOption = Annotated[str | None, typer.Option(help="Attribute name that opts a function out.")]


def _say(message: str) -> None:
    err_console.print(message, markup=False, highlight=False, soft_wrap=True)


def _fail(message: str) -> typer.Exit:
    _say(f"Error: {message}")
    return typer.Exit(_EXIT_ERROR)


def _build_options(namespace: str | None, style: AnnotationStyle | None, skip_marker: str | None) -> SyncOptions:
    try:
        return options_from_env(namespace=namespace, style=style, skip_marker_name=skip_marker)
    except ValidationError as exc:
        raise _fail(str(exc)) from None


def _split_exclude(exclude: list[str] | None) -> list[str]:
    return [part for value in exclude or [] for part in value.split(",") if part]


def _run_text(action: Action, text: str, options: SyncOptions) -> None:
    try:
        result = process(action, text, options)
    except TracingSyncError as exc:
        raise _fail(str(exc)) from None

    if isinstance(result, CheckOutcome):
        if result.missing_at is not None:
            _say(f"Missing instrumentation at {result.missing_at.line}:{result.missing_at.column}.")
            raise typer.Exit(_EXIT_MISSING)
        return
    typer.echo(result, nl=False)


def _run_path(action: Action, path: Path, exclude: list[str], options: SyncOptions) -> None:
    try:
        files = list(iter_rust_files(path, exclude))
    except OSError as exc:
        raise _fail(str(exc)) from None

    failed = False
    for file_path in files:
        try:
            logger.debug("Processing %s", file_path)
            original = file_path.read_bytes()
            result = process(action, original, options)
            if isinstance(result, CheckOutcome):
                if result.missing_at is not None:
                    position = result.missing_at
                    _say(f"Missing instrumentation at {file_path}:{position.line}:{position.column}.")
                    raise typer.Exit(_EXIT_MISSING)
                continue
            updated = result.encode("utf-8")
            if updated != original:
                file_path.write_bytes(updated)
                logger.info("Rewrote %s", file_path)
        except (TracingSyncError, OSError) as exc:
            _say(f"Error: Failed to process {file_path}: {exc}")
            failed = True

    if failed:
        raise typer.Exit(_EXIT_ERROR)


def _run(
    action: Action,
    path: Path,
    text: str | None,
    exclude: list[str] | None,
    namespace: str | None,
    style: AnnotationStyle | None,
    skip_marker: str | None,
) -> None:
    options = _build_options(namespace, style, skip_marker)
    if text is not None:
        _run_text(action, text, options)
    else:
        _run_path(action, path, _split_exclude(exclude), options)


def check(
    path: PathOption = Path("."),
    text: TextOption = None,
    exclude: ExcludeOption = None,
    skip_marker: SkipMarkerOption = None,
) -> None:
    """Check that every function carries an instrumentation annotation."""
    _run(Action.CHECK, path, text, exclude, None, None, skip_marker)


def fix(
    path: PathOption = Path("."),
    text: TextOption = None,
    exclude: ExcludeOption = None,
    namespace: NamespaceOption = None,
    style: StyleOption = None,
    skip_marker: SkipMarkerOption = None,
) -> None:
    """Add an instrumentation annotation to every function missing one."""
    _run(Action.FIX, path, text, exclude, namespace, style, skip_marker)


def strip(
    path: PathOption = Path("."),
    text: TextOption = None,
    exclude: ExcludeOption = None,
    skip_marker: SkipMarkerOption = None,
) -> None:
    """Remove instrumentation annotations from every function."""
    _run(Action.STRIP, path, text, exclude, None, None, skip_marker)
