import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _optional_int(name: str):
    value = os.getenv(name, "")
    return int(value) if value else None


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///wizardflow.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    APPLICATIONS_OPEN = _flag("APPLICATIONS_OPEN", "true")

    # Seconds each step has before the wizard expires; unset disables expiry.
    WIZARD_TIMEOUT = _optional_int("WIZARD_TIMEOUT")
    WIZARD_SESSION_KEY = os.getenv("WIZARD_SESSION_KEY", "apply")
    WIZARD_AUTO_ADVANCE = _flag("WIZARD_AUTO_ADVANCE", "true")
    WIZARD_DEFAULT_BRANCH = _flag("WIZARD_DEFAULT_BRANCH", "true")
    WIZARD_FORWARD_ONLY = _flag("WIZARD_FORWARD_ONLY", "false")
    WIZARD_CONTINUE_ON_EXPIRED = _flag("WIZARD_CONTINUE_ON_EXPIRED", "false")
    WIZARD_PRUNE_UNREACHABLE = _flag("WIZARD_PRUNE_UNREACHABLE", "true")
    WIZARD_QUERY_PARAM = os.getenv("WIZARD_QUERY_PARAM", "step")
    # 303 makes browsers follow a POST with a GET
    WIZARD_REDIRECT_CODE = int(os.getenv("WIZARD_REDIRECT_CODE", "302"))


class DevConfig(Config):
    DEBUG = True

class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    WIZARD_TIMEOUT = None


config_by_name = {
    "development": DevConfig,
    "testing": TestConfig,
    "production": Config,
}
