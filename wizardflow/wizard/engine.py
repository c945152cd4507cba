import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .branches import Directives, apply_directives, normalize_directives
from .events import WizardEvent, WizardEvents, WizardHandlers
from .state import WizardState, restore as restore_state
from .tree import ResolvedPath, StepTree

logger = logging.getLogger(__name__)

_CONFIG_KEYS = {
    "WIZARD_AUTO_ADVANCE": "auto_advance",
    "WIZARD_DEFAULT_BRANCH": "default_branch",
    "WIZARD_CONTINUE_ON_EXPIRED": "continue_on_expired",
    "WIZARD_FORWARD_ONLY": "forward_only",
    "WIZARD_QUERY_PARAM": "query_param",
    "WIZARD_SESSION_KEY": "session_key",
    "WIZARD_TIMEOUT": "timeout",
    "WIZARD_PRUNE_UNREACHABLE": "prune_unreachable",
    "WIZARD_REDIRECT_CODE": "redirect_code",
}


@dataclass
class WizardRequest:
    step: Optional[str] = None
    cancel: bool = False
    reset: bool = False
    previous: bool = False
    save_draft: bool = False


@dataclass
class WizardOutcome:
    """
    What the host should do after process():

    REDIRECT  go to the wizard at `step` (None = wizard entry point)
    LEAVE     the wizard is over for this session, go to `url`
    RENDER    the step was not accepted, show `event.response`
    """

    REDIRECT = "redirect"
    LEAVE = "leave"
    RENDER = "render"

    kind: str
    state: WizardState
    step: Optional[str] = None
    url: Optional[str] = None
    event: Optional[WizardEvent] = None
    status_code: int = 302

    @property
    def terminal(self) -> bool:
        return self.kind == self.LEAVE


class Wizard:
    def __init__(
        self,
        steps: Union[StepTree, List[Any]],
        handlers: WizardHandlers,
        *,
        auto_advance: bool = True,
        default_branch: bool = True,
        continue_on_expired: bool = False,
        forward_only: bool = False,
        query_param: str = "step",
        session_key: str = "Wizard",
        timeout: Optional[int] = None,
        finished_url: str = "/",
        cancelled_url: str = "/",
        expired_url: str = "/",
        draft_saved_url: str = "/",
        prune_unreachable: bool = True,
        redirect_code: int = 302,
        clock: Callable[[], float] = time.time,
    ):
        handlers.validate()
        self.tree = steps if isinstance(steps, StepTree) else StepTree(steps)
        self.handlers = handlers

        self.auto_advance = auto_advance
        self.default_branch = default_branch
        self.continue_on_expired = continue_on_expired
        self.forward_only = forward_only
        self.query_param = query_param
        self.session_key = session_key
        self.timeout = timeout
        self.finished_url = finished_url
        self.cancelled_url = cancelled_url
        self.expired_url = expired_url
        self.draft_saved_url = draft_saved_url
        self.prune_unreachable = prune_unreachable
        self.redirect_code = redirect_code
        self.clock = clock

    @classmethod
    def from_config(cls, steps, handlers: WizardHandlers, config: Mapping[str, Any], **overrides) -> "Wizard":
        """Build a wizard from WIZARD_* keys of a Flask config; keyword overrides win."""
        options: Dict[str, Any] = {}
        for key, option in _CONFIG_KEYS.items():
            if config.get(key) is not None:
                options[option] = config[key]
        options.update(overrides)
        return cls(steps, handlers, **options)

    # ---- path -------------------------------------------------------------

    def resolve(self, state: WizardState) -> ResolvedPath:
        return self.tree.resolve(state.branches, self.default_branch)

    def steps(self, state: WizardState) -> List[str]:
        return self.resolve(state).steps

    def branch(self, state: WizardState, directives: Directives) -> WizardState:
        directives = normalize_directives(directives)
        declared = self.tree.branch_names()
        unknown = [name for name in directives if name not in declared]
        if unknown:
            logger.warning("Directives for undeclared branches: %s", unknown)
        state.branches = apply_directives(state.branches, directives)

        if self.prune_unreachable and state.steps:
            path = self.resolve(state)
            stale = [step for step in state.steps if step not in path]
            for step in stale:
                del state.steps[step]
            if stale:
                logger.debug("Dropped data for steps no longer on the path: %s", stale)
        return state

    def expected_step(self, state: WizardState, path: Optional[ResolvedPath] = None) -> Optional[str]:
        """First step on the path without saved data; None once every step has some."""
        path = path if path is not None else self.resolve(state)
        saved = state.steps or {}
        for step in path:
            if step not in saved:
                return step
        return None

    def has_completed(self, state: WizardState) -> bool:
        return self.expected_step(state) is None

    def is_valid_step(self, state: WizardState, step: Optional[str]) -> bool:
        path = self.resolve(state)
        index = path.index(step)
        if index < 0:
            return False

        expected = self.expected_step(state, path)
        if self.forward_only:
            return step == expected
        if expected is None:
            return True
        return index <= path.index(expected)

    def has_expired(self, state: WizardState) -> bool:
        if not self.timeout or state.expires_at is None:
            return False
        return state.expires_at < int(self.clock())

    # ---- data -------------------------------------------------------------

    def read(self, state: WizardState, step: Optional[str] = None) -> Any:
        saved = state.steps or {}
        if step is None:
            return dict(saved)
        return saved.get(step)

    def save(self, state: WizardState, data: Any, step: str) -> WizardState:
        if state.steps is None:
            state.steps = {}
        state.steps[step] = data
        return state

    def restore(self, state: WizardState, data: Any) -> bool:
        return restore_state(state, data)

    def reset(self, state: WizardState) -> WizardState:
        return state.clear()

    # ---- navigation view ----------------------------------------------------

    def position(self, state: WizardState, step: Optional[str]) -> int:
        """1-based position of `step` on the path, 0 when it is not on it."""
        return self.resolve(state).index(step) + 1

    def step_count(self, state: WizardState) -> int:
        return len(self.resolve(state))

    def step_label(self, state: WizardState, step: str) -> str:
        return self.resolve(state).label(step)

    # ---- request processing -----------------------------------------------

    def process(self, state: WizardState, request: Optional[WizardRequest] = None) -> WizardOutcome:
        request = request or WizardRequest()
        step = request.step or None

        if request.cancel:
            return self._cancelled(state, step)

        if request.reset and not self.forward_only:
            self._reset_wizard(state, step)
            step = None

        if step is None:
            if not state.started and not self._start(state):
                return self._finished(state, completed=False)
            if self.has_completed(state):
                return self._finished(state, completed=True)
            return self._next_step(state, None)

        if not state.started:
            logger.debug("Step %s requested before the wizard started", step)
            return self._outcome(WizardOutcome.REDIRECT, state, step=None)

        if not self.is_valid_step(state, step):
            return self._invalid_step(state, step)

        if request.previous and not self.forward_only:
            return self._previous_step(state, step)

        event = self._fire(WizardEvents.PROCESS_STEP, state, step, self.read(state, step))
        if not event.accepted:
            return self._outcome(WizardOutcome.RENDER, state, step=step, event=event)

        if self.has_expired(state):
            outcome = self._expired(state, step)
            if outcome is not None:
                return outcome

        self.save(state, event.data, step)

        if request.save_draft:
            return self._save_draft(state, step)
        return self._next_step(state, step)

    def _outcome(self, kind: str, state: WizardState, **kwargs) -> WizardOutcome:
        return WizardOutcome(kind, state, status_code=self.redirect_code, **kwargs)

    def _fire(self, name: str, state: WizardState, step: Optional[str] = None,
              data: Any = None, **extra) -> WizardEvent:
        event = WizardEvent(name=name, wizard=self, state=state, step=step, data=data, **extra)
        return self.handlers.dispatch(event)

    def _start(self, state: WizardState) -> bool:
        event = self._fire(WizardEvents.START, state)
        if event.accepted:
            state.steps = {}
        return event.accepted

    def _finished(self, state: WizardState, completed: bool) -> WizardOutcome:
        event = self._fire(WizardEvents.FINISHED, state, data=self.read(state), completed=completed)
        state.clear()
        logger.info("Wizard %s finished (completed=%s)", self.session_key, completed)
        return self._outcome(WizardOutcome.LEAVE, state, url=self.finished_url, event=event)

    def _next_step(self, state: WizardState, step: Optional[str]) -> WizardOutcome:
        path = self.resolve(state)
        if self.auto_advance or step is None:
            target = self.expected_step(state, path)
        else:
            index = path.index(step) + 1
            target = path.steps[index] if index < len(path) else None

        if self.timeout:
            state.expires_at = int(self.clock()) + int(self.timeout)
        return self._outcome(WizardOutcome.REDIRECT, state, step=target)

    def _previous_step(self, state: WizardState, step: str) -> WizardOutcome:
        path = self.resolve(state)
        index = max(path.index(step) - 1, 0)
        return self._outcome(WizardOutcome.REDIRECT, state, step=path.steps[index])

    def _invalid_step(self, state: WizardState, step: str) -> WizardOutcome:
        logger.warning("Invalid wizard step requested: %s", step)
        event = self._fire(WizardEvents.INVALID_STEP, state, step)
        return self._outcome(WizardOutcome.REDIRECT, state, step=self.expected_step(state), event=event)

    def _expired(self, state: WizardState, step: str) -> Optional[WizardOutcome]:
        logger.warning("Wizard %s expired at step %s", self.session_key, step)
        event = self._fire(WizardEvents.EXPIRED, state, step, self.read(state))
        if self.continue_on_expired:
            return None
        state.clear()
        return self._outcome(WizardOutcome.LEAVE, state, url=self.expired_url, event=event)

    def _cancelled(self, state: WizardState, step: Optional[str]) -> WizardOutcome:
        event = self._fire(WizardEvents.CANCEL, state, step, self.read(state))
        state.clear()
        logger.info("Wizard %s cancelled", self.session_key)
        return self._outcome(WizardOutcome.LEAVE, state, url=self.cancelled_url, event=event)

    def _reset_wizard(self, state: WizardState, step: Optional[str]) -> None:
        state.clear()
        self._fire(WizardEvents.RESET, state, step)

    def _save_draft(self, state: WizardState, step: str) -> WizardOutcome:
        event = self._fire(WizardEvents.SAVE_DRAFT, state, step, state.snapshot())
        state.clear()
        logger.info("Wizard %s saved as draft at step %s", self.session_key, step)
        return self._outcome(WizardOutcome.LEAVE, state, url=self.draft_saved_url, event=event)
