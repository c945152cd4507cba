from typing import Any, Callable, Dict, List, Optional, Tuple

from .engine import Wizard
from .state import WizardState

DEFAULT_CSS = {
    "active": "wzd-active",
    "first": "wzd-first",
    "last": "wzd-last",
    "previous": "wzd-previous",
}


class WizardMenu:
    """Breadcrumb-style progress menu over the resolved steps."""

    def __init__(self, wizard: Wizard, state: WizardState, current_step: Optional[str],
                 last_item: Optional[str] = None, css: Optional[Dict[str, str]] = None):
        self.wizard = wizard
        self.state = state
        self.current_step = current_step
        self.last_item = last_item
        self.css = dict(DEFAULT_CSS, **(css or {}))

    @property
    def progress(self) -> Tuple[int, int]:
        return self.wizard.position(self.state, self.current_step), self.wizard.step_count(self.state)

    def items(self, url_for_step: Callable[[str], str]) -> List[Dict[str, Any]]:
        path = self.wizard.resolve(self.state)
        items: List[Dict[str, Any]] = []
        previous = True

        for step in path:
            active = step == self.current_step
            if active:
                previous = False

            classes = []
            if previous:
                classes.append(self.css["previous"])
            if active:
                classes.append(self.css["active"])

            linked = active or (previous and not self.wizard.forward_only)
            items.append({
                "step": step,
                "label": path.label(step),
                "url": url_for_step(step) if linked else None,
                "active": active,
                "classes": classes,
            })

        if items:
            items[0]["classes"].append(self.css["first"])
            if not self.last_item:
                items[-1]["classes"].append(self.css["last"])

        if self.last_item:
            items.append({
                "step": None,
                "label": self.last_item,
                "url": None,
                "active": False,
                "classes": [self.css["last"]],
            })

        for item in items:
            item["css_class"] = " ".join(item.pop("classes"))
        return items
