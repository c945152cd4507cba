from datetime import datetime
from ..extensions import db

class DraftStatus:
    SAVED = "saved"
    RESUMED = "resumed"

    ALL = [SAVED, RESUMED]

class WizardDraft(db.Model):
    __tablename__ = "wizard_drafts"

    id = db.Column(db.Integer, primary_key=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    wizard = db.Column(db.String(128), nullable=False, index=True)

    # step the user was on when the draft was saved
    step = db.Column(db.String(128), nullable=True)

    steps = db.Column(db.JSON, default=dict, nullable=False)

    branches = db.Column(db.JSON, default=dict, nullable=False)

    expires_at = db.Column(db.Integer, nullable=True)

    status = db.Column(db.String(32), default=DraftStatus.SAVED, nullable=False)

    def snapshot(self) -> list:
        return [self.steps, self.branches, self.expires_at]

    def __repr__(self) -> str:
        return f"<WizardDraft {self.id} wizard={self.wizard} status={self.status}>"
