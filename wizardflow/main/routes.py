from flask import render_template
from . import main_bp
from ..models import Submission, WizardDraft, DraftStatus

@main_bp.get("/")
def index():
    drafts = (
        WizardDraft.query.filter_by(status=DraftStatus.SAVED)
        .order_by(WizardDraft.created_at.desc())
        .limit(20)
        .all()
    )
    submissions = Submission.query.order_by(Submission.created_at.desc()).limit(20).all()
    return render_template("main/index.html", drafts=drafts, submissions=submissions)
