import logging
import os
import time
from datetime import datetime, timezone

from flask import (Blueprint, Flask, abort, current_app, jsonify, render_template,
                   request)
from werkzeug.exceptions import HTTPException

from catalog import load_catalog_dir
from config import Config
from errors import InvalidRequestError, NotFoundError, TrainerError
from models import RANDOM_MODE
from review_log import ReviewLog
from selector import pick_for_count, pick_unconstrained, syllable_count
from store import SessionStore

logger = logging.getLogger(__name__)

bp = Blueprint("trainer", __name__)


# ── Collaborators (attached by create_app) ────────────────────────────────────

def get_catalog():
    return current_app.extensions["word_catalog"]


def get_store():
    return current_app.extensions["session_store"]


def get_review_log():
    return current_app.extensions["review_log"]


def _parse_count(raw):
    """Positive integer from a URL segment, else InvalidRequestError."""
    try:
        count = int(raw)
    except (TypeError, ValueError):
        count = 0
    if count < 1:
        logger.warning("Invalid count parameter %r", raw)
        raise InvalidRequestError("Invalid count parameter")
    return count


# ── Words ─────────────────────────────────────────────────────────────────────

@bp.route("/api/word-counts")
def word_counts():
    return jsonify({"counts": get_catalog().available_counts()})


@bp.route("/api/syllable-counts")
def syllable_counts():
    """Distinct segment counts in the unconstrained pool (repeat-avoidance input)."""
    return jsonify({"counts": sorted(get_catalog().distinct_token_counts())})


@bp.route("/api/word/<count>")
def word_for_count(count):
    count = _parse_count(count)
    word = pick_for_count(get_catalog(), count)
    logger.debug("Word for count %d: %s", count, word)
    return jsonify({"word": word})


@bp.route("/api/word")
@bp.route("/api/word-random")
def random_word():
    return jsonify({"word": pick_unconstrained(get_catalog())})


# ── Sessions ──────────────────────────────────────────────────────────────────

@bp.route("/api/performance", methods=["POST"])
def ingest_session():
    data = request.get_json(force=True, silent=True)
    if not data:
        raise InvalidRequestError("No data provided")
    logger.debug("Performance body keys: %s", sorted(data) if isinstance(data, dict) else type(data))
    record = get_store().ingest(data, received_from=request.remote_addr)
    return jsonify({"ok": True, "sessionId": record.session_id})


@bp.route("/api/performance")
def list_sessions():
    sessions = [s.to_dict() for s in get_store().list_sessions()]
    return jsonify({"sessions": sessions})


@bp.route("/api/performance/<session_id>")
def session_detail(session_id):
    return jsonify({"session": get_store().get(session_id).to_dict()})


# ── Review log ────────────────────────────────────────────────────────────────

@bp.route("/api/check-word", methods=["POST"])
def flag_word():
    data = request.get_json(force=True, silent=True) or {}
    get_review_log().flag(data.get("word"))
    return jsonify({"ok": True})


@bp.route("/api/check-list")
def flagged_words():
    return jsonify({"words": get_review_log().words()})


@bp.route("/api/check-list", methods=["DELETE"])
def clear_flagged_words():
    get_review_log().clear()
    return jsonify({"ok": True})


# ── Health / diagnostics ──────────────────────────────────────────────────────

@bp.route("/api/health")
def health():
    catalog = get_catalog()
    return jsonify({
        "ok": True,
        "counts": len(catalog.available_counts()),
        "totalWords": len(catalog),
        "time": datetime.now(timezone.utc).isoformat(),
    })


@bp.route("/api/debug/state")
def debug_state():
    if not current_app.config.get("DEBUG_ENDPOINTS"):
        abort(404)
    state = get_catalog().stats()
    state.update({
        "ok": True,
        "cwd": os.getcwd(),
        "pid": os.getpid(),
        "uptimeSec": round(time.time() - current_app.extensions["started_at"], 3),
    })
    return jsonify(state)


# ── Pages ─────────────────────────────────────────────────────────────────────

@bp.route("/")
def index():
    return render_template("index.html", counts=get_catalog().available_counts())


@bp.route("/words")
@bp.route("/words.html")
def words_page():
    count = request.args.get("count", RANDOM_MODE)
    if count != RANDOM_MODE:
        _parse_count(count)
    return render_template("words.html", count=count)


@bp.route("/performance")
def performance_page():
    sessions = sorted(get_store().list_sessions(),
                      key=lambda s: s.started_at or "", reverse=True)
    return render_template("performance.html", sessions=sessions)


@bp.route("/performance/<session_id>")
def performance_detail_page(session_id):
    try:
        record = get_store().get(session_id)
    except NotFoundError:
        abort(404)
    rows = list(zip(record.words_shown, record.durations + [None]))
    return render_template("performance_detail.html", record=record, rows=rows)


@bp.route("/check")
def check_page():
    return render_template("check.html", words=get_review_log().words())


# ── App factory ───────────────────────────────────────────────────────────────

def fmt_duration(total_seconds):
    """Format a seconds value into a short human-readable duration string."""
    if total_seconds is None:
        return "–"
    secs = float(total_seconds)
    if secs < 60:
        return f"{secs:.1f}s"
    m, s = divmod(int(round(secs)), 60)
    h, m = divmod(m, 60)
    if h > 0:
        return f"{h}h {m:02d}m {s:02d}s"
    return f"{m}m {s:02d}s"


def configure_logging(app):
    """Configure logging once, using LOG_LEVEL from the app config."""
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level,
                        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    app.logger.setLevel(level)


def register_error_handlers(app):
    @app.errorhandler(TrainerError)
    def handle_trainer_error(e):
        if e.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("[ERROR] %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_class=Config, catalog=None, store=None, review_log=None):
    """Build the app; fails with EmptyCatalogError when there is no word data."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json.ensure_ascii = False
    configure_logging(app)

    if catalog is None:
        catalog = load_catalog_dir(app.config["DATA_DIR"])
    if store is None:
        store = SessionStore(app.config["PERFORMANCE_DIR"])
    if review_log is None:
        review_log = ReviewLog(app.config["REVIEW_LOG_PATH"])
    review_log.ensure_exists()

    app.extensions["word_catalog"] = catalog
    app.extensions["session_store"] = store
    app.extensions["review_log"] = review_log
    app.extensions["started_at"] = time.time()

    app.register_blueprint(bp)
    prefix = app.config.get("MIRROR_PREFIX")
    if prefix:
        app.register_blueprint(bp, name="trainer_mirror", url_prefix=prefix)

    app.add_template_filter(fmt_duration, "fmt_duration")
    app.add_template_filter(syllable_count, "syllables")
    register_error_handlers(app)

    @app.before_request
    def log_request():
        logger.debug("[REQ] %s %s", request.method, request.full_path)

    @app.after_request
    def allow_cross_origin(response):
        if "/api/" in request.path:
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    logger.info("Trainer ready with %r", catalog)
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=app.config["PORT"], debug=os.environ.get("FLASK_DEBUG") == "1")
