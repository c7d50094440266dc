from __future__ import annotations

from querydeck.config.settings import ExecutionSettings


def requires_confirmation(settings: ExecutionSettings) -> bool:
    """Whether an execute request must pause for user approval."""
    return settings.confirm_before_execute
