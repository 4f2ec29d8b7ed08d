"""Append-only log of words flagged for manual review."""
import logging
import os

from errors import InvalidRequestError, ReviewLogError

logger = logging.getLogger(__name__)


class ReviewLog:
    def __init__(self, path):
        self.path = path

    def ensure_exists(self):
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            # append mode creates the file without touching existing entries
            with open(self.path, "a", encoding="utf-8"):
                pass
        except OSError as exc:
            logger.error("Error initializing review log %s: %s", self.path, exc)

    def flag(self, word):
        if not isinstance(word, str) or not word.strip():
            raise InvalidRequestError("No word provided")
        # one entry per line
        word = " ".join(word.split())
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(word + "\n")
        except OSError as exc:
            logger.error("Error writing to review log: %s", exc)
            raise ReviewLogError("Failed to flag word for review") from exc
        logger.info("Flagged word for review: %s", word)

    def words(self):
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return [line.rstrip("\n") for line in f if line.strip()]
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.error("Error reading review log: %s", exc)
            raise ReviewLogError("Failed to read flagged words") from exc

    def clear(self):
        try:
            with open(self.path, "w", encoding="utf-8"):
                pass
        except OSError as exc:
            logger.error("Error clearing review log: %s", exc)
            raise ReviewLogError("Failed to clear flagged words") from exc
        logger.info("Review log cleared")
