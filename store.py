"""Session store: one JSON file per committed session.

Layout is ``<base_dir>/YYYY/MM/DD/<sessionId>.json`` where the date is the day
the server received the record, not the day the session started. A session
re-sent after midnight therefore lands in a second partition; lookups return
whichever copy the scan visits last.
"""
import json
import logging
import os
import re
import tempfile
from datetime import datetime

from errors import InvalidRecordError, NotFoundError, PersistError
from models import SessionRecord, utc_now_iso

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"
_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,127}$")


def is_safe_session_id(session_id) -> bool:
    return bool(_SAFE_ID.match(session_id or "")) and ".." not in session_id


class SessionStore:
    def __init__(self, base_dir, clock=None):
        self.base_dir = base_dir
        # Local wall clock; decides the date partition
        self.clock = clock or datetime.now

    def partition_dir(self, when):
        return os.path.join(self.base_dir, f"{when.year:04d}", f"{when.month:02d}", f"{when.day:02d}")

    def ingest(self, payload, received_from=None):
        """Validate and persist a committed session. Returns the stored record."""
        record = SessionRecord.from_payload(payload)
        if not is_safe_session_id(record.session_id):
            raise InvalidRecordError("sessionId contains unsupported characters")
        record.received_from = received_from
        record.recorded_at = utc_now_iso()

        directory = self.partition_dir(self.clock())
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            logger.error("Could not create session directory %s: %s", directory, exc)
            raise PersistError("Session directory could not be created") from exc

        path = os.path.join(directory, record.session_id + RECORD_SUFFIX)
        # readers only ever see a complete file: write aside, then swap in
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=directory,
                                             suffix=".tmp", delete=False) as f:
                tmp_path = f.name
                json.dump(record.to_dict(), f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.error("Could not write session file %s: %s", path, exc)
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistError("Session file could not be written") from exc

        logger.info("Stored session %s (%d words) at %s",
                    record.session_id, len(record.words_shown), path)
        return record

    def _walk(self):
        """Yield record file paths, partitions in ascending date order."""
        if not os.path.isdir(self.base_dir):
            return
        for root, dirs, files in os.walk(self.base_dir):
            dirs.sort()
            for name in sorted(files):
                if name.endswith(RECORD_SUFFIX):
                    yield os.path.join(root, name)

    @staticmethod
    def _read(path):
        with open(path, "r", encoding="utf-8") as f:
            return SessionRecord.from_payload(json.load(f))

    def list_sessions(self):
        summaries = []
        for path in self._walk():
            try:
                summaries.append(self._read(path).summary())
            except (OSError, ValueError, InvalidRecordError) as exc:
                logger.warning("Skipping unreadable session file %s: %s", path, exc)
        return summaries

    def get(self, session_id):
        if not is_safe_session_id(session_id):
            raise NotFoundError()
        wanted = session_id + RECORD_SUFFIX
        found = None
        for path in self._walk():
            if os.path.basename(path) == wanted:
                found = path
        if found is None:
            raise NotFoundError()
        try:
            return self._read(found)
        except (OSError, ValueError, InvalidRecordError) as exc:
            raise PersistError(f"Session {session_id} could not be read") from exc
