from datetime import datetime
from ..extensions import db

class Submission(db.Model):
    __tablename__ = "submissions"

    id = db.Column(db.Integer, primary_key=True)

    wizard = db.Column(db.String(128), nullable=False, index=True)

    data = db.Column(db.JSON, default=dict, nullable=False)

    draft_id = db.Column(db.Integer, db.ForeignKey("wizard_drafts.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Submission {self.id} wizard={self.wizard}>"
