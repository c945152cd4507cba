from functools import lru_cache
from pathlib import Path

from flask import abort, current_app, flash, redirect, render_template, session, url_for
from . import apply_bp
from .forms import STEP_FORMS, form_data
from ..extensions import db
from ..models import DraftStatus, Submission, WizardDraft
from ..wizard import Branch, StepTree, Wizard, WizardHandlers
from ..wizard.web import WizardView

STEPS_FILE = Path(__file__).parent / "config" / "steps.json"


@lru_cache(maxsize=1)
def _step_tree() -> StepTree:
    return StepTree.from_json_file(str(STEPS_FILE))


def _draft_key(wizard: Wizard) -> str:
    return f"{wizard.session_key}.draft_id"


def on_start(event):
    event.accepted = bool(current_app.config.get("APPLICATIONS_OPEN", True))


def on_process_step(event):
    wizard = event.wizard
    form = STEP_FORMS[event.step](data=event.data or None)

    if form.validate_on_submit():
        event.data = form_data(form)
        if event.step == "job_application":
            chosen, other = ("degree", "nodegree") if form.has_degree.data else ("nodegree", "degree")
            wizard.branch(event.state, {chosen: Branch.SELECT, other: Branch.DESELECT})
        event.accepted = True
        return None

    return render_template(
        "apply/step.html",
        form=form,
        step=event.step,
        label=wizard.step_label(event.state, event.step),
        position=wizard.position(event.state, event.step),
        count=wizard.step_count(event.state),
        forward_only=wizard.forward_only,
        menu=wizard_view.menu_items(event.state, event.step, wizard),
        summary=wizard.read(event.state) if event.step == "confirm" else None,
        action=wizard_view.url_for_step(event.step, wizard=wizard),
    )


def on_finished(event):
    wizard = event.wizard
    draft_id = session.pop(_draft_key(wizard), None)
    if not event.completed:
        flash("Applications are closed at the moment.", "warning")
        return None

    submission = Submission(wizard=wizard.session_key, data=event.data, draft_id=draft_id)
    db.session.add(submission)
    db.session.commit()

    flash("Application submitted.", "success")
    return redirect(url_for("apply.done", submission_id=submission.id))


def on_invalid_step(event):
    flash("Please complete the steps in order.", "warning")


def on_reset(event):
    session.pop(_draft_key(event.wizard), None)
    flash("Application restarted.", "info")


def on_cancel(event):
    session.pop(_draft_key(event.wizard), None)
    flash("Application cancelled.", "info")


def on_expired(event):
    if not event.wizard.continue_on_expired:
        flash("Your application timed out. Please start again.", "warning")


def on_save_draft(event):
    wizard = event.wizard
    steps, branches, expires_at = event.data

    draft_id = session.pop(_draft_key(wizard), None)
    draft = db.session.get(WizardDraft, draft_id) if draft_id else None
    if draft is None:
        draft = WizardDraft(wizard=wizard.session_key)
        db.session.add(draft)

    draft.step = event.step
    draft.steps = steps
    draft.branches = branches
    draft.expires_at = expires_at
    draft.status = DraftStatus.SAVED
    db.session.commit()

    flash(f"Draft #{draft.id} saved.", "info")


HANDLERS = WizardHandlers(
    on_start=on_start,
    on_process_step=on_process_step,
    on_finished=on_finished,
    on_invalid_step=on_invalid_step,
    on_reset=on_reset,
    on_cancel=on_cancel,
    on_expired=on_expired,
    on_save_draft=on_save_draft,
)


def _wizard() -> Wizard:
    return Wizard.from_config(
        _step_tree(),
        HANDLERS,
        current_app.config,
        finished_url="main.index",
        cancelled_url="main.index",
        expired_url="main.index",
        draft_saved_url="apply.drafts",
    )


wizard_view = WizardView(_wizard, menu_last_item="Submit").attach(apply_bp, "/", endpoint="wizard")


@apply_bp.get("/drafts")
def drafts():
    rows = (
        WizardDraft.query.filter_by(status=DraftStatus.SAVED)
        .order_by(WizardDraft.updated_at.desc())
        .all()
    )
    return render_template("apply/drafts.html", drafts=rows)


@apply_bp.post("/drafts/<int:draft_id>/resume")
def resume_draft(draft_id: int):
    draft = WizardDraft.query.get_or_404(draft_id)
    if draft.status != DraftStatus.SAVED:
        flash("That draft has already been resumed.", "warning")
        return redirect(url_for("apply.drafts"))

    wizard = wizard_view.wizard
    store = wizard_view.store()
    state = store.load()
    if not wizard.restore(state, draft.snapshot()):
        current_app.logger.warning("Draft %s has malformed wizard data", draft.id)
        abort(400)

    store.save(state)
    session[_draft_key(wizard)] = draft.id
    draft.status = DraftStatus.RESUMED
    db.session.commit()

    return redirect(wizard_view.url_for_step())


@apply_bp.get("/done/<int:submission_id>")
def done(submission_id: int):
    submission = Submission.query.get_or_404(submission_id)
    return render_template("apply/done.html", submission=submission)
