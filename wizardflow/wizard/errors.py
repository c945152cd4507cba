class WizardError(Exception):
    """Base class for wizard errors."""


class WizardConfigError(WizardError):
    """Raised while wiring a wizard: bad step tree, missing handler, wrong host."""
