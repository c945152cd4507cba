"""
Flask binding for Wizard.

    view = WizardView(wizard)
    view.attach(bp, "/apply", endpoint="wizard")

registers /apply and /apply/<step> on the blueprint; each request loads the
wizard state from flask.session, runs Wizard.process() and turns the
outcome into a redirect or the handler's rendered response.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Set, Union

from flask import Blueprint, Flask, has_request_context, redirect, request, session, url_for
from flask.blueprints import BlueprintSetupState

from .engine import Wizard, WizardOutcome, WizardRequest
from .errors import WizardConfigError, WizardError
from .menu import WizardMenu
from .state import SessionStateStore, WizardState

logger = logging.getLogger(__name__)

DEFAULT_BUTTONS = {
    "cancel": "cancel",
    "previous": "previous",
    "reset": "reset",
    "save_draft": "save_draft",
}


class WizardView:
    """
    `wizard` is either a Wizard or a zero-argument factory returning one; a
    factory is called once per request so it can read current_app.config.

    The step URL variable is the wizard's `query_param`. On a Blueprint the
    rules are added when the blueprint is registered, inside the app
    context, so a factory reading WIZARD_QUERY_PARAM sees the app's config.
    """

    def __init__(self, wizard: Union[Wizard, Callable[[], Wizard]],
                 buttons: Optional[Dict[str, str]] = None, menu_last_item: Optional[str] = None):
        self._wizard = wizard
        self.buttons = dict(DEFAULT_BUTTONS, **(buttons or {}))
        self.menu_last_item = menu_last_item
        self.endpoint: Optional[str] = None
        self._endpoints: Set[str] = set()

    @property
    def wizard(self) -> Wizard:
        if isinstance(self._wizard, Wizard):
            return self._wizard
        return self._wizard()

    @property
    def query_param(self) -> str:
        return self.wizard.query_param

    def attach(self, host: Union[Flask, Blueprint], rule: str, endpoint: str = "wizard",
               methods: Optional[List[str]] = None) -> "WizardView":
        if not isinstance(host, (Flask, Blueprint)):
            raise WizardConfigError("Wizard host must be a Flask app or Blueprint")

        methods = methods or ["GET", "POST"]
        rule = rule.rstrip("/")

        if isinstance(host, Flask):
            with host.app_context():
                param = self.query_param
            self._add_rules(host.add_url_rule, rule, endpoint, param, methods)
            self._bind(endpoint)
            return self

        def register(state: BlueprintSetupState) -> None:
            with state.app.app_context():
                param = self.query_param
            self._add_rules(state.add_url_rule, rule, endpoint, param, methods)
            # same naming BlueprintSetupState.add_url_rule gives nested blueprints
            self._bind(f"{state.name_prefix}.{state.name}.{endpoint}".lstrip("."))

        host.record(register)
        return self

    def _add_rules(self, add_url_rule, rule: str, endpoint: str, param: str, methods: List[str]) -> None:
        add_url_rule(rule or "/", endpoint, self.dispatch, methods=methods, defaults={param: None})
        add_url_rule(f"{rule}/<{param}>", endpoint, self.dispatch, methods=methods)

    def _bind(self, endpoint: str) -> None:
        self.endpoint = endpoint
        self._endpoints.add(endpoint)

    def current_endpoint(self) -> str:
        """The endpoint serving this request when it is one of ours, else the last one attached."""
        if self.endpoint is None:
            raise WizardConfigError("WizardView is not attached to an app or blueprint")
        if has_request_context() and request.endpoint in self._endpoints:
            return request.endpoint
        return self.endpoint

    def store(self) -> SessionStateStore:
        return SessionStateStore(session, self.wizard.session_key)

    def request_flags(self, step: Optional[str]) -> WizardRequest:
        values = request.values
        return WizardRequest(
            step=step or None,
            cancel=self.buttons["cancel"] in values,
            reset=self.buttons["reset"] in values,
            previous=self.buttons["previous"] in values,
            save_draft=self.buttons["save_draft"] in values,
        )

    def dispatch(self, **view_args: Any):
        wizard = self.wizard
        param = wizard.query_param
        step = view_args.get(param) or request.args.get(param)

        store = SessionStateStore(session, wizard.session_key)
        outcome = wizard.process(store.load(), self.request_flags(step))
        store.save(outcome.state)
        logger.debug("%s step=%s -> %s %s", request.method, step, outcome.kind, outcome.step or outcome.url or "")
        return self.respond(outcome, wizard)

    def respond(self, outcome: WizardOutcome, wizard: Optional[Wizard] = None):
        event = outcome.event

        if outcome.kind == WizardOutcome.RENDER:
            if event is None or event.response is None:
                raise WizardError(f"Step '{outcome.step}' was not accepted and its handler returned no response")
            return event.response

        if outcome.kind == WizardOutcome.LEAVE:
            if event is not None and event.response is not None:
                return event.response
            return redirect(self.destination(outcome.url), code=outcome.status_code)

        return redirect(self.url_for_step(outcome.step, wizard=wizard), code=outcome.status_code)

    def url_for_step(self, step: Optional[str] = None, wizard: Optional[Wizard] = None, **values: Any) -> str:
        endpoint = self.current_endpoint()
        if step:
            values[(wizard or self.wizard).query_param] = step
        return url_for(endpoint, **values)

    @staticmethod
    def destination(target: Optional[str]) -> str:
        """Literal URLs pass through; anything else is an endpoint name."""
        if not target:
            return "/"
        if target.startswith("/") or "://" in target:
            return target
        return url_for(target)

    def menu(self, state: WizardState, step: Optional[str], wizard: Optional[Wizard] = None) -> WizardMenu:
        return WizardMenu(wizard or self.wizard, state, step, last_item=self.menu_last_item)

    def menu_items(self, state: WizardState, step: Optional[str],
                   wizard: Optional[Wizard] = None) -> List[Dict[str, Any]]:
        wizard = wizard or self.wizard
        return self.menu(state, step, wizard).items(lambda target: self.url_for_step(target, wizard=wizard))
