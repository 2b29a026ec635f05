from __future__ import annotations

from pathlib import Path
from typing import Iterable


def resolve_source_roots(project_dir: Path, configured_roots: Iterable[str]) -> list[Path]:
    """Absolute source roots; relative ones are taken as children of the project directory.

    No existence check: a missing root simply never matches a changed file.
    """
    roots: list[Path] = []
    for root in configured_roots:
        p = Path(root)
        roots.append(p if p.is_absolute() else project_dir / p)
    return roots
