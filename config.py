import os

basedir = os.path.abspath(os.path.dirname(__file__))


def _env_flag(name, default="0"):
    return os.environ.get(name, default).lower() in ("1", "true", "yes", "on")


class Config:
    """Runtime settings; every value can be overridden from the environment."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")

    # One <n>_syllable.json file per syllable count
    DATA_DIR = os.environ.get("DATA_DIR", os.path.join(basedir, "data"))
    # Committed sessions, partitioned as YYYY/MM/DD/<sessionId>.json
    PERFORMANCE_DIR = os.environ.get("PERFORMANCE_DIR", os.path.join(basedir, "performance"))
    REVIEW_LOG_PATH = os.environ.get(
        "REVIEW_LOG_PATH", os.path.join(basedir, "words_needs_to_check.log")
    )

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    DEBUG_ENDPOINTS = _env_flag("DEBUG_ENDPOINTS")
    # Same API mounted a second time under this prefix ("" disables it)
    MIRROR_PREFIX = os.environ.get("MIRROR_PREFIX", "/aren")
    PORT = int(os.environ.get("PORT", "3000"))
