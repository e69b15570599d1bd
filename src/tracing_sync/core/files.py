import logging
import os
from collections.abc import Iterator, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

_RUST_SUFFIX = ".rs"
_BUILD_SCRIPT = "build.rs"


def is_rust_source(path: Path) -> bool:
    return path.suffix == _RUST_SUFFIX and path.name != _BUILD_SCRIPT


def is_excluded(path: Path, exclude: Sequence[str]) -> bool:
    """Whether any exclude string occurs anywhere in the path's string form."""
    path_str = str(path)
    return any(pattern in path_str for pattern in exclude)


def iter_rust_files(root: str | Path, exclude: Sequence[str] = ()) -> Iterator[Path]:
    """Yield Rust source files under ``root`` in a stable order, following symlinks.

    ``root`` may itself be a single file.
    """
    root_path = Path(root)
    if not root_path.exists():
        raise FileNotFoundError(f"Path not found: {root}")

    if root_path.is_file():
        candidates: Iterator[Path] = iter([root_path])
    else:
        candidates = _walk(root_path)

    for path in candidates:
        if not is_rust_source(path):
            continue
        if is_excluded(path, exclude):
            logger.debug("Excluded %s", path)
            continue
        yield path


def _walk(root: Path) -> Iterator[Path]:
    seen: set[Path] = set()
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        real = Path(dirpath).resolve()
        if real in seen:
            # Symlink cycle.
            dirnames.clear()
            continue
        seen.add(real)
        dirnames.sort()
        for filename in sorted(filenames):
            yield Path(dirpath) / filename
