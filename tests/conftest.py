import pytest

from wizardflow import create_app
from wizardflow.extensions import db
from wizardflow.wizard import WizardHandlers


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no Flask app needed)")
    config.addinivalue_line("markers", "integration: Integration tests (app, database, routes)")


@pytest.fixture()
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


class FakeClock:
    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


class EventRecorder:
    """Collects every wizard event; accepts start and steps unless told not to."""

    def __init__(self):
        self.events = []
        self.accept_start = True
        self.accept_steps = True

    @property
    def names(self):
        return [event.name for event in self.events]

    def last(self, name):
        matching = [event for event in self.events if event.name == name]
        return matching[-1] if matching else None

    def _record(self, event):
        self.events.append(event)

    def on_start(self, event):
        self._record(event)
        event.accepted = self.accept_start

    def on_process_step(self, event):
        self._record(event)
        if not self.accept_steps:
            return f"form for {event.step}"
        event.data = {"value": event.step}
        event.accepted = True
        return None

    def on_other(self, event):
        self._record(event)

    def handlers(self) -> WizardHandlers:
        return WizardHandlers(
            on_start=self.on_start,
            on_process_step=self.on_process_step,
            on_finished=self.on_other,
            on_invalid_step=self.on_other,
            on_reset=self.on_other,
            on_cancel=self.on_other,
            on_expired=self.on_other,
            on_save_draft=self.on_other,
        )


@pytest.fixture()
def recorder():
    return EventRecorder()
