import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from errors import InvalidRecordError

RANDOM_MODE = "random"

# Payload keys sent by the practice client, in storage order
RECORD_FIELDS = (
    "sessionId", "startedAt", "finishedAt", "mode",
    "targetCount", "durations", "wordsShown",
)
# Older clients sent these names
_LEGACY_KEYS = {"countMode": "mode", "words": "wordsShown"}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_from_epoch(seconds: float) -> str:
    stamp = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value):
    return (_is_int(value) or isinstance(value, float)) and math.isfinite(value)


def is_valid_mode(mode):
    """``"random"``, a positive int, or a positive digit string."""
    if mode == RANDOM_MODE:
        return True
    if _is_int(mode):
        return mode > 0
    return isinstance(mode, str) and mode.isdigit() and int(mode) > 0


def _check_record_values(data):
    """Values are stored exactly as sent, so they must already have the right shape."""
    if not isinstance(data["sessionId"], str):
        raise InvalidRecordError("sessionId must be a string")
    for key in ("startedAt", "finishedAt"):
        if not isinstance(data[key], str):
            raise InvalidRecordError(f"{key} must be an ISO timestamp string")
    if not is_valid_mode(data["mode"]):
        raise InvalidRecordError("mode must be 'random' or a positive syllable count")
    if not _is_int(data["targetCount"]):
        raise InvalidRecordError("targetCount must be an integer")

    durations, words = data["durations"], data["wordsShown"]
    if not isinstance(durations, list) or not isinstance(words, list):
        raise InvalidRecordError("durations and wordsShown must be arrays")
    if not all(_is_number(d) and d >= 0 for d in durations):
        raise InvalidRecordError("durations must be non-negative numbers")
    if not all(isinstance(w, str) for w in words):
        raise InvalidRecordError("wordsShown must contain only strings")
    # one gap between each pair of consecutive words
    if len(durations) != len(words) - 1:
        raise InvalidRecordError("durations must have one entry fewer than wordsShown")


@dataclass
class SessionRecord:
    session_id: str
    started_at: str
    finished_at: str
    mode: str
    target_count: int
    durations: list = field(default_factory=list)
    words_shown: list = field(default_factory=list)
    received_from: str = None
    recorded_at: str = None

    @classmethod
    def from_payload(cls, data):
        """Build a record from a client JSON body; raises InvalidRecordError."""
        if not isinstance(data, dict):
            raise InvalidRecordError("Session record must be a JSON object")
        data = dict(data)
        for old, new in _LEGACY_KEYS.items():
            if old in data and new not in data:
                data[new] = data.pop(old)

        missing = [k for k in RECORD_FIELDS if data.get(k) is None]
        if missing:
            raise InvalidRecordError(f"Missing required fields: {', '.join(missing)}")
        _check_record_values(data)

        return cls(
            session_id=data["sessionId"],
            started_at=data["startedAt"],
            finished_at=data["finishedAt"],
            mode=data["mode"],
            target_count=data["targetCount"],
            durations=list(data["durations"]),
            words_shown=list(data["wordsShown"]),
            received_from=data.get("receivedFrom"),
            recorded_at=data.get("recordedAt"),
        )

    def to_dict(self):
        out = {
            "sessionId": self.session_id,
            "startedAt": self.started_at,
            "finishedAt": self.finished_at,
            "mode": self.mode,
            "targetCount": self.target_count,
            "durations": self.durations,
            "wordsShown": self.words_shown,
        }
        if self.received_from is not None:
            out["receivedFrom"] = self.received_from
        if self.recorded_at is not None:
            out["recordedAt"] = self.recorded_at
        return out

    def summary(self):
        return SessionSummary(
            session_id=self.session_id,
            started_at=self.started_at,
            finished_at=self.finished_at,
            mode=self.mode,
            target_count=self.target_count,
            origin=self.received_from,
        )

    @property
    def total_seconds(self):
        return sum(self.durations)

    def __repr__(self):
        return f"<SessionRecord {self.session_id} {self.mode} {len(self.words_shown)} words>"


@dataclass
class SessionSummary:
    session_id: str
    started_at: str
    finished_at: str
    mode: str
    target_count: int
    origin: str = None

    def to_dict(self):
        return {
            "sessionId": self.session_id,
            "startedAt": self.started_at,
            "finishedAt": self.finished_at,
            "mode": self.mode,
            "targetCount": self.target_count,
            "origin": self.origin,
        }
