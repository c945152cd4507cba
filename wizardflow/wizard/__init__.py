from .branches import Branch, apply_directives, get_directive, normalize_directives  # noqa: F401
from .engine import Wizard, WizardOutcome, WizardRequest  # noqa: F401
from .errors import WizardConfigError, WizardError  # noqa: F401
from .events import WizardEvent, WizardEvents, WizardHandlers  # noqa: F401
from .menu import WizardMenu  # noqa: F401
from .state import SessionStateStore, WizardState, restore  # noqa: F401
from .tree import ResolvedPath, StepTree, humanize, normalize_spec, resolve  # noqa: F401
