import logging
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Callable, Optional

from .errors import WizardConfigError
from .state import WizardState

if TYPE_CHECKING:
    from .engine import Wizard

logger = logging.getLogger(__name__)


class WizardEvents:
    START = "wizard_start"
    PROCESS_STEP = "wizard_process_step"
    FINISHED = "wizard_finished"
    INVALID_STEP = "wizard_invalid_step"

    RESET = "wizard_reset"
    CANCEL = "wizard_cancel"
    EXPIRED = "wizard_expired"
    SAVE_DRAFT = "wizard_save_draft"

    ALL = [START, PROCESS_STEP, FINISHED, INVALID_STEP, RESET, CANCEL, EXPIRED, SAVE_DRAFT]


@dataclass
class WizardEvent:
    """
    Passed to every handler. Handlers of START and PROCESS_STEP set
    `accepted` to let the flow continue; a PROCESS_STEP handler may also
    replace `data` with what should be saved for the step.
    """

    name: str
    wizard: "Wizard"
    state: WizardState
    step: Optional[str] = None
    data: Any = None
    accepted: bool = False
    completed: bool = False
    response: Any = None


Handler = Callable[[WizardEvent], Any]


@dataclass
class WizardHandlers:
    on_start: Optional[Handler] = None
    on_process_step: Optional[Handler] = None
    on_finished: Optional[Handler] = None
    on_invalid_step: Optional[Handler] = None

    on_reset: Optional[Handler] = None
    on_cancel: Optional[Handler] = None
    on_expired: Optional[Handler] = None
    on_save_draft: Optional[Handler] = None

    REQUIRED = ("on_start", "on_process_step", "on_finished", "on_invalid_step")

    def validate(self) -> None:
        for f in fields(self):
            handler = getattr(self, f.name)
            if handler is None:
                if f.name in self.REQUIRED:
                    raise WizardConfigError(f"Handler '{f.name}' is missing")
                continue
            if not callable(handler):
                raise WizardConfigError(f"Handler '{f.name}' is not callable")

    def handler_for(self, event_name: str) -> Optional[Handler]:
        return getattr(self, "on_" + event_name[len("wizard_"):], None)

    def dispatch(self, event: WizardEvent) -> WizardEvent:
        handler = self.handler_for(event.name)
        if handler is None:
            logger.debug("No handler for %s (step=%s)", event.name, event.step)
            return event

        result = handler(event)
        if result is not None:
            event.response = result
        logger.debug("%s step=%s accepted=%s", event.name, event.step, event.accepted)
        return event
