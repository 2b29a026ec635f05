from __future__ import annotations

import logging
import subprocess


logger = logging.getLogger(__name__)


class DiffExecutionError(RuntimeError):
    pass


def list_changed_files(baseline: str, vcs_binary: str = "git") -> list[str]:
    """Return the paths `git diff --name-only <baseline>` reports, relative to the cwd.

    Empty output is only a failure when git wrote something to stderr.
    """
    cmd = [vcs_binary, "diff", "--name-only", baseline]
    logger.debug("Running %s", " ".join(cmd))

    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise DiffExecutionError(f"Could not load changed files from {vcs_binary}: {exc}") from exc

    out = [line for line in (proc.stdout or "").splitlines() if line]
    if not out:
        message = proc.stderr or ""
        if message:
            raise DiffExecutionError(f"Calling {vcs_binary} diff failed:\n{message}")

    logger.debug("%d changed file(s) against '%s'", len(out), baseline)
    return out
