"""Load and persist the gateway's JSON configuration document."""

from __future__ import annotations

import json
import os
import stat
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class LoadStatus(str, Enum):
    """How the configuration document was obtained."""

    LOADED = "loaded"
    MISSING = "missing"
    INVALID = "invalid"


@dataclass
class LoadResult:
    """A loaded configuration tree and where it came from."""

    status: LoadStatus
    tree: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


def ensure_directory(path: Path) -> bool:
    """Create ``path`` and its parents if needed.

    Returns True when the directory did not exist before.
    """
    path = Path(path)
    if path.is_dir():
        return False
    path.mkdir(parents=True, exist_ok=True)
    return True


def load_document(path: Path) -> LoadResult:
    """Read the configuration document at ``path``.

    A missing file yields an empty tree. So does a file that is not valid
    JSON or whose root is not an object; that case is reported as INVALID
    rather than raised. Other read errors propagate.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return LoadResult(status=LoadStatus.MISSING)
    except UnicodeDecodeError as exc:
        return LoadResult(status=LoadStatus.INVALID, error=str(exc))

    try:
        tree = json.loads(raw)
    except json.JSONDecodeError as exc:
        return LoadResult(status=LoadStatus.INVALID, error=str(exc))

    if not isinstance(tree, dict):
        return LoadResult(
            status=LoadStatus.INVALID,
            error=f"expected a JSON object, got {type(tree).__name__}",
        )
    return LoadResult(status=LoadStatus.LOADED, tree=tree)


def render_document(tree: dict[str, Any]) -> str:
    """Serialize ``tree`` with two-space indentation in insertion order."""
    return json.dumps(tree, indent=2, ensure_ascii=False)


def save_document(path: Path, tree: dict[str, Any]) -> None:
    """Write ``tree`` to ``path`` by replacing the file in one rename.

    The replacement keeps the permission bits of the file it replaces. A new
    file gets the default mode allowed by the umask.
    """
    path = Path(path)
    output = render_document(tree)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(output)
        os.chmod(tmp_name, _target_mode(path))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask
