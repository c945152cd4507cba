import pytest
from flask import Blueprint, Flask, current_app

from wizardflow.wizard import Wizard, WizardConfigError, WizardState
from wizardflow.wizard.web import WizardView

pytestmark = pytest.mark.unit


def build_app(recorder, **options):
    app = Flask(__name__)
    app.config["SECRET_KEY"] = "test"
    bp = Blueprint("signup", __name__)
    view = WizardView(Wizard(["a", "b"], recorder.handlers(), session_key="signup", **options))
    view.attach(bp, "/signup")
    app.register_blueprint(bp)
    return app, view


def test_attach_requires_flask_host(recorder):
    view = WizardView(Wizard(["a"], recorder.handlers()))
    with pytest.raises(WizardConfigError):
        view.attach(object(), "/wizard")


def test_url_for_step_requires_attach(recorder):
    view = WizardView(Wizard(["a"], recorder.handlers()))
    with pytest.raises(WizardConfigError):
        view.url_for_step("a")


def test_routes_and_session_round_trip(recorder):
    app, view = build_app(recorder)
    client = app.test_client()

    resp = client.get("/signup")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/signup/a")

    resp = client.post("/signup/a")
    assert resp.headers["Location"].endswith("/signup/b")
    with client.session_transaction() as sess:
        assert sess["signup.steps"] == {"a": {"value": "a"}}

    with app.test_request_context():
        assert view.url_for_step() == "/signup"
        assert view.url_for_step("b") == "/signup/b"


def test_request_flags_come_from_form_buttons(recorder):
    app, view = build_app(recorder)
    with app.test_request_context("/signup/b", method="POST", data={"previous": "", "save_draft": "1"}):
        flags = view.request_flags("b")

    assert flags.step == "b"
    assert flags.previous and flags.save_draft
    assert not flags.cancel and not flags.reset


def test_unaccepted_step_without_response_is_an_error(recorder):
    from wizardflow.wizard import WizardError

    app, _ = build_app(recorder)
    app.testing = True
    recorder.on_process_step = lambda event: None
    handlers = recorder.handlers()
    view = WizardView(Wizard(["a"], handlers, session_key="other"))
    view.attach(app, "/other")

    client = app.test_client()
    client.get("/other")
    with pytest.raises(WizardError):
        client.post("/other/a")


def test_destination_accepts_urls_and_endpoints(recorder):
    app, _ = build_app(recorder)
    with app.test_request_context():
        assert WizardView.destination("/done") == "/done"
        assert WizardView.destination("https://example.com/x") == "https://example.com/x"
        assert WizardView.destination("signup.wizard") == "/signup"
        assert WizardView.destination(None) == "/"


def test_menu_items_use_view_urls(recorder):
    app, view = build_app(recorder)
    with app.test_request_context():
        items = view.menu_items(WizardState(steps={"a": {}}), "b")
    assert [item["url"] for item in items] == ["/signup/a", "/signup/b"]


def test_query_param_comes_from_wizard_config(recorder):
    app = Flask(__name__)
    app.config.update(SECRET_KEY="test", WIZARD_QUERY_PARAM="page", WIZARD_SESSION_KEY="paged")
    bp = Blueprint("paged", __name__)
    view = WizardView(lambda: Wizard.from_config(["a", "b"], recorder.handlers(), current_app.config))
    view.attach(bp, "/w")
    app.register_blueprint(bp)

    rules = {rule.rule for rule in app.url_map.iter_rules() if rule.endpoint == "paged.wizard"}
    assert rules == {"/w", "/w/<page>"}

    client = app.test_client()
    client.get("/w")
    resp = client.post("/w/a")
    assert resp.headers["Location"].endswith("/w/b")

    with app.test_request_context():
        assert view.query_param == "page"
        assert view.url_for_step("b") == "/w/b"


def test_nested_blueprint_endpoint(recorder):
    app = Flask(__name__)
    app.config["SECRET_KEY"] = "test"
    parent = Blueprint("portal", __name__, url_prefix="/portal")
    child = Blueprint("signup", __name__, url_prefix="/signup")
    view = WizardView(Wizard(["a", "b"], recorder.handlers(), session_key="nested"))
    view.attach(child, "/")
    parent.register_blueprint(child)
    app.register_blueprint(parent)

    assert view.endpoint == "portal.signup.wizard"

    client = app.test_client()
    resp = client.get("/portal/signup/")
    assert resp.headers["Location"].endswith("/portal/signup/a")

    with app.test_request_context():
        assert view.url_for_step("b") == "/portal/signup/b"


def test_redirects_use_configured_status_code(recorder):
    app, _ = build_app(recorder, redirect_code=303)
    client = app.test_client()

    assert client.get("/signup").status_code == 303
    assert client.post("/signup/a").status_code == 303
