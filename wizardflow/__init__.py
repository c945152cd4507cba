import os
from typing import Optional

from flask import Flask
from .config import config_by_name
from .extensions import csrf, db, migrate
from .forms import CSRFOnlyForm

def create_app(config_name: Optional[str] = None):
    app = Flask(__name__)

    env_name = (config_name or os.getenv("APP_ENV") or "development").lower()
    app.config.from_object(config_by_name.get(env_name, config_by_name["development"]))

    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    @app.context_processor
    def inject_global_forms():
        return {
            "csrf_form": CSRFOnlyForm(),
        }

    from .main import main_bp
    from .apply import apply_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(apply_bp, url_prefix="/apply")

    return app
