"""Client-side practice session timeline.

A recorder collects one timestamp per displayed word and, when the session
ends, turns them into a SessionRecord that is handed to a sender exactly once.
"""
import enum
import logging
import random
import string
import time

from models import iso_from_epoch

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_session_id(now=None, rng=random):
    """``<epoch-ms>-<9 base36 chars>``"""
    now = time.time() if now is None else now
    suffix = "".join(rng.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(now * 1000)}-{suffix}"


class RecorderState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"


class SessionRecorder:
    def __init__(self, mode, target_count, sender, session_id=None, clock=time.time):
        self.mode = str(mode)
        self.target_count = int(target_count)
        self.sender = sender
        self.clock = clock
        self.session_id = session_id or new_session_id(clock())
        self.state = RecorderState.IDLE
        self.started_at = None
        self.timeline = []
        self.words_shown = []

    @property
    def shown_count(self):
        return len(self.words_shown)

    @property
    def committed(self):
        return self.state is RecorderState.COMMITTED

    def show(self, word):
        """Record that ``word`` is now on screen."""
        if self.committed:
            logger.debug("Session %s already committed, ignoring %r", self.session_id, word)
            return
        now = self.clock()
        if self.state is RecorderState.IDLE:
            self.state = RecorderState.ACTIVE
            self.started_at = iso_from_epoch(now)
        self.timeline.append(now)
        self.words_shown.append(word)

    def durations(self):
        return [later - earlier for earlier, later in zip(self.timeline, self.timeline[1:])]

    def build_record(self):
        last = self.timeline[-1] if self.timeline else self.clock()
        return {
            "sessionId": self.session_id,
            "startedAt": self.started_at,
            "finishedAt": iso_from_epoch(last),
            "mode": self.mode,
            "targetCount": self.target_count,
            "durations": self.durations(),
            "wordsShown": list(self.words_shown),
        }

    def commit(self):
        """Finalize and send the session. Safe to call from several exit paths."""
        if self.state is RecorderState.COMMITTED:
            return None
        if self.state is RecorderState.IDLE:
            logger.info("No session data to commit for %s", self.session_id)
            return None

        record = self.build_record()
        # marked before sending: a failed send is never repeated
        self.state = RecorderState.COMMITTED
        try:
            self.sender(record)
        except Exception:
            logger.exception("Commit failed for session %s", self.session_id)
        return record

    def __repr__(self):
        return f"<SessionRecorder {self.session_id} {self.state.value} {self.shown_count} words>"
