from __future__ import annotations

from typing import Optional


class BootstrapError(RuntimeError):
    """Base class for failures that abort a bootstrap run.

    `state` is filled in by the orchestrator with the name of the step that failed.
    """

    state: Optional[str] = None
