from .wizard_draft import WizardDraft, DraftStatus  # noqa: F401
from .submission import Submission  # noqa: F401
