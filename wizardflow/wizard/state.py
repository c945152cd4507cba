import logging
from dataclasses import dataclass, field
from typing import Any, Dict, MutableMapping, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class WizardState:
    """
    Everything a wizard remembers between requests.

    `steps` is None until the wizard has been started; afterwards it maps
    step id -> whatever the step handler saved for it.
    """

    steps: Optional[Dict[str, Any]] = None
    branches: Dict[str, str] = field(default_factory=dict)
    expires_at: Optional[int] = None

    @property
    def started(self) -> bool:
        return self.steps is not None

    def snapshot(self) -> Tuple[Dict[str, Any], Dict[str, str], Optional[int]]:
        return dict(self.steps or {}), dict(self.branches), self.expires_at

    def clear(self) -> "WizardState":
        self.steps = None
        self.branches = {}
        self.expires_at = None
        return self


def _is_timestamp(value: Any) -> bool:
    return value is None or (isinstance(value, int) and not isinstance(value, bool))


def restore(state: WizardState, data: Any) -> bool:
    """
    Load a (steps, branches, expires_at) snapshot, typically a saved draft.
    Returns False and leaves `state` alone if `data` has the wrong shape.
    """
    if not isinstance(data, (list, tuple)) or len(data) != 3:
        logger.warning("Rejected wizard restore: expected 3 items, got %r", type(data).__name__)
        return False

    steps, branches, expires_at = data
    if not isinstance(steps, dict) or not isinstance(branches, dict) or not _is_timestamp(expires_at):
        logger.warning("Rejected wizard restore: wrong slot types")
        return False

    state.steps = dict(steps)
    state.branches = dict(branches)
    state.expires_at = expires_at
    return True


class SessionStateStore:
    """
    Keeps a WizardState in a key/value session under three keys:
    <namespace>.steps, <namespace>.branches and <namespace>.timeout.

    Writes are plain overwrites. Two requests from the same browser session
    racing each other resolve as last write wins.
    """

    def __init__(self, backend: MutableMapping[str, Any], namespace: str = "Wizard"):
        self.backend = backend
        self.namespace = namespace
        self.steps_key = f"{namespace}.steps"
        self.branches_key = f"{namespace}.branches"
        self.timeout_key = f"{namespace}.timeout"

    def load(self) -> WizardState:
        steps = self.backend.get(self.steps_key)
        return WizardState(
            steps=dict(steps) if steps is not None else None,
            branches=dict(self.backend.get(self.branches_key) or {}),
            expires_at=self.backend.get(self.timeout_key),
        )

    def save(self, state: WizardState) -> None:
        if not state.started:
            self.clear()
            return

        self.backend[self.steps_key] = dict(state.steps)
        if state.branches:
            self.backend[self.branches_key] = dict(state.branches)
        else:
            self.backend.pop(self.branches_key, None)
        if state.expires_at is None:
            self.backend.pop(self.timeout_key, None)
        else:
            self.backend[self.timeout_key] = state.expires_at

    def clear(self) -> None:
        for key in (self.steps_key, self.branches_key, self.timeout_key):
            self.backend.pop(key, None)
