"""End-to-end tests for the job application wizard blueprint."""

import pytest

from wizardflow.extensions import db
from wizardflow.models import DraftStatus, Submission, WizardDraft

pytestmark = pytest.mark.integration

APPLICANT = {"name": "Ada Lovelace", "email": "ada@example.com", "position": "analyst"}


def location(resp):
    return resp.headers["Location"]


def start(client):
    resp = client.get("/apply/")
    assert resp.status_code == 302
    assert location(resp).endswith("/apply/job_application")
    return resp


def test_step_page_renders_with_menu(client):
    start(client)
    resp = client.get("/apply/job_application")

    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert "Your details" in body
    assert "Step 1 of 4" in body
    assert "wzd-active" in body


def test_degree_path_to_submission(client):
    start(client)

    resp = client.post("/apply/job_application", data=dict(APPLICANT, has_degree="y"))
    assert location(resp).endswith("/apply/college")

    resp = client.post("/apply/college", data={"college": "Cambridge", "graduation_year": "2015"})
    assert location(resp).endswith("/apply/degree_type")

    resp = client.post("/apply/degree_type", data={"degree_type": "MSc", "major": "Maths"})
    assert location(resp).endswith("/apply/confirm")

    resp = client.get("/apply/confirm")
    assert "Cambridge" in resp.get_data(as_text=True)

    resp = client.post("/apply/confirm", data={"agree": "y"})
    assert location(resp).endswith("/apply/")

    resp = client.get("/apply/")
    submission = Submission.query.one()
    assert location(resp).endswith(f"/apply/done/{submission.id}")
    assert set(submission.data) == {"job_application", "college", "degree_type", "confirm"}
    assert submission.data["college"]["graduation_year"] == 2015

    with client.session_transaction() as sess:
        assert "apply.steps" not in sess

    resp = client.get(f"/apply/done/{submission.id}")
    assert resp.status_code == 200


def test_no_degree_takes_experience_branch(client):
    start(client)

    resp = client.post("/apply/job_application", data=APPLICANT)
    assert location(resp).endswith("/apply/experience")

    with client.session_transaction() as sess:
        assert sess["apply.branches"] == {"nodegree": "Select"}

    resp = client.get("/apply/college")
    assert location(resp).endswith("/apply/experience")


def test_zero_years_of_experience_is_accepted(client):
    start(client)
    client.post("/apply/job_application", data=APPLICANT)

    resp = client.post("/apply/experience", data={"years": "0"})

    assert resp.status_code == 302
    assert location(resp).endswith("/apply/confirm")
    with client.session_transaction() as sess:
        assert sess["apply.steps"]["experience"]["years"] == 0


def test_missing_years_of_experience_is_rejected(client):
    start(client)
    client.post("/apply/job_application", data=APPLICANT)

    resp = client.post("/apply/experience", data={"summary": "Lab work"})

    assert resp.status_code == 200
    with client.session_transaction() as sess:
        assert "experience" not in sess["apply.steps"]


def test_invalid_form_rerenders_step(client):
    start(client)
    resp = client.post("/apply/job_application", data={"name": ""})

    assert resp.status_code == 200
    with client.session_transaction() as sess:
        assert sess["apply.steps"] == {}


def test_skipping_ahead_is_redirected(client):
    start(client)
    resp = client.get("/apply/confirm")
    assert location(resp).endswith("/apply/job_application")

    resp = client.get("/apply/no-such-step")
    assert location(resp).endswith("/apply/job_application")


def test_previous_button_goes_back(client):
    start(client)
    client.post("/apply/job_application", data=APPLICANT)

    resp = client.post("/apply/experience", data={"previous": ""})
    assert location(resp).endswith("/apply/job_application")


def test_cancel_clears_session(client):
    start(client)
    client.post("/apply/job_application", data=APPLICANT)

    resp = client.post("/apply/experience", data={"cancel": ""})
    assert location(resp) == "/" or location(resp).endswith("localhost/")
    with client.session_transaction() as sess:
        assert "apply.steps" not in sess
        assert "apply.branches" not in sess


def test_closed_applications_do_not_start(app, client):
    app.config["APPLICATIONS_OPEN"] = False
    resp = client.get("/apply/")

    assert location(resp) == "/" or location(resp).endswith("localhost/")
    with client.session_transaction() as sess:
        assert "apply.steps" not in sess


def test_save_draft_and_resume(client):
    start(client)
    client.post("/apply/job_application", data=dict(APPLICANT, has_degree="y"))

    resp = client.post("/apply/college", data={"college": "MIT", "graduation_year": "2010", "save_draft": ""})
    assert location(resp).endswith("/apply/drafts")

    draft = WizardDraft.query.one()
    assert draft.step == "college"
    assert set(draft.steps) == {"job_application", "college"}
    assert draft.branches == {"degree": "Select"}
    with client.session_transaction() as sess:
        assert "apply.steps" not in sess

    assert "Draft #" in client.get("/apply/drafts").get_data(as_text=True)

    resp = client.post(f"/apply/drafts/{draft.id}/resume")
    assert location(resp).endswith("/apply/")
    assert db.session.get(WizardDraft, draft.id).status == DraftStatus.RESUMED

    resp = client.get("/apply/")
    assert location(resp).endswith("/apply/degree_type")

    client.post("/apply/degree_type", data={"degree_type": "PhD"})
    client.post("/apply/confirm", data={"agree": "y"})
    client.get("/apply/")

    assert Submission.query.one().draft_id == draft.id


def test_resuming_malformed_draft_is_rejected(client):
    draft = WizardDraft(wizard="apply", steps=["not", "a", "dict"], branches={})
    db.session.add(draft)
    db.session.commit()

    resp = client.post(f"/apply/drafts/{draft.id}/resume")

    assert resp.status_code == 400
    with client.session_transaction() as sess:
        assert "apply.steps" not in sess


def test_expired_application_starts_over(app, client):
    app.config["WIZARD_TIMEOUT"] = 60
    start(client)

    with client.session_transaction() as sess:
        sess["apply.timeout"] = 1

    resp = client.post("/apply/job_application", data=APPLICANT)
    assert location(resp) == "/" or location(resp).endswith("localhost/")
    with client.session_transaction() as sess:
        assert "apply.steps" not in sess
