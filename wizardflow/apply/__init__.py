from flask import Blueprint

apply_bp = Blueprint("apply", __name__)

from . import routes  # noqa: E402,F401
