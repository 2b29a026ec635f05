from __future__ import annotations

from jacoco_changes.config import GenerationPolicy
from jacoco_changes.models import ReportScope


def should_generate(scope: ReportScope, policy: GenerationPolicy) -> bool:
    if policy.skip_when_no_changes and not scope.has_changes:
        return False
    return True
