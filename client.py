"""HTTP client for the trainer API, used by the terminal practice runner."""
import logging
import threading

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5


class TrainerClient:
    def __init__(self, base_url="http://localhost:3000", timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def _get(self, path):
        response = self.http.get(self._url(path), timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def word_counts(self):
        return self._get("api/word-counts")["counts"]

    def syllable_counts(self):
        return self._get("api/syllable-counts")["counts"]

    def word_for_count(self, count):
        return self._get(f"api/word/{int(count)}")["word"]

    def random_word(self):
        return self._get("api/word-random")["word"]

    def session(self, session_id):
        return self._get(f"api/performance/{session_id}")["session"]

    def sessions(self):
        return self._get("api/performance")["sessions"]

    def flag_word(self, word):
        response = self.http.post(self._url("api/check-word"), json={"word": word},
                                  timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def flagged_words(self):
        return self._get("api/check-list")["words"]

    def post_session(self, record):
        response = self.http.post(self._url("api/performance"), json=record,
                                  timeout=self.timeout)
        response.raise_for_status()
        return response.json()


class HttpRecordSender:
    """Posts a committed session once, without waiting for the answer.

    Failures are logged and dropped; nothing is retried.
    """

    def __init__(self, client, background=True):
        self.client = client
        self.background = background
        self.pending = []

    def _send(self, record):
        try:
            result = self.client.post_session(record)
        except requests.RequestException as exc:
            logger.error("Commit failed for session %s: %s", record.get("sessionId"), exc)
            return None
        logger.info("Performance committed: %s", result)
        return result

    def __call__(self, record):
        if not self.background:
            return self._send(record)
        worker = threading.Thread(target=self._send, args=(record,),
                                  name=f"commit-{record.get('sessionId')}", daemon=True)
        worker.start()
        self.pending.append(worker)
        return worker

    def flush(self, timeout=1.0):
        """Give in-flight sends up to ``timeout`` seconds each before exit."""
        for worker in self.pending:
            worker.join(timeout)
        self.pending = [w for w in self.pending if w.is_alive()]
