from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


JAVA_SUFFIX = ".java"
CLASS_SUFFIX = "*.class"

# The renderer treats an empty include list as "include every class file".
# A single empty pattern is present but matches nothing, so a scope with no
# relevant changes renders an empty report instead of the whole codebase.
SENTINEL_PATTERN = ""

REPORT_DIRECTORY = "jacoco-changes"
OUTPUT_NAME = f"{REPORT_DIRECTORY}/index"
REPORT_TITLE = "JaCoCo Changes Test"


class RunState(Enum):
    START = "start"
    DEFAULTS_APPLIED = "defaults_applied"
    SKIPPED = "skipped"
    SCOPE_COMPUTED = "scope_computed"
    CONFIGURATION_INJECTED = "configuration_injected"
    DELEGATED = "delegated"
    DONE = "done"


@dataclass(frozen=True)
class ReportScope:
    includes: tuple[str, ...]
    excludes: tuple[str, ...] = ()

    @property
    def has_changes(self) -> bool:
        return any(p != SENTINEL_PATTERN for p in self.includes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "includes": list(self.includes),
            "excludes": list(self.excludes),
            "has_changes": self.has_changes,
        }


@dataclass(frozen=True)
class RunResult:
    scope: ReportScope | None
    generated: bool
    skip_reason: str | None = None
    states: list[RunState] = field(default_factory=list)
