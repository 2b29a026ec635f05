from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from jacoco_changes.models import CLASS_SUFFIX, JAVA_SUFFIX, SENTINEL_PATTERN


logger = logging.getLogger(__name__)


def map_to_include_patterns(
    changed_files: Iterable[str],
    source_roots: list[Path],
    cwd: Path,
    source_suffix: str = JAVA_SUFFIX,
    artifact_suffix: str = CLASS_SUFFIX,
) -> list[str]:
    """Map changed source files to class file include patterns.

    `a/A.java` under a source root becomes `a/A*.class`, which also covers
    nested and inner classes compiled from the same file. A file nested
    under several roots yields one pattern per root. When nothing maps,
    the result is `[SENTINEL_PATTERN]` rather than an empty list.
    """
    patterns: list[str] = []
    for changed in changed_files:
        path = cwd / changed
        if not path.name.endswith(source_suffix):
            continue
        for root in source_roots:
            # Segment-wise, so /a/src does not claim /a/srcOther.
            if not path.is_relative_to(root):
                continue
            sub_path = str(path.relative_to(root))
            patterns.append(sub_path[: len(sub_path) - len(source_suffix)] + artifact_suffix)

    logger.debug("Mapped changed files to %d include pattern(s)", len(patterns))
    if not patterns:
        return [SENTINEL_PATTERN]
    return patterns
