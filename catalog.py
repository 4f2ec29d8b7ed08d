"""Word catalog: words bucketed by syllable count, loaded once at startup."""
import glob
import json
import logging
import os
import re

from errors import EmptyCatalogError, UnknownBucketError

logger = logging.getLogger(__name__)

SOURCE_PATTERN = "*_syllable.json"
_SOURCE_NAME = re.compile(r"^(\d+)_syllable\.json$")


class WordCatalog:
    """Read-only mapping of syllable count -> words.

    Buckets are tuples so nothing handed out can mutate the catalog.
    """

    def __init__(self, buckets):
        self._buckets = {
            int(count): tuple(words) for count, words in sorted(buckets.items())
        }
        self._all_words = tuple(
            word for count in sorted(self._buckets) for word in self._buckets[count]
        )

    def available_counts(self):
        return sorted(self._buckets)

    def bucket(self, count):
        try:
            return self._buckets[count]
        except KeyError:
            raise UnknownBucketError(count) from None

    def all_words(self):
        return self._all_words

    def distinct_token_counts(self):
        """Whitespace-token counts present in the unconstrained pool."""
        return {len(word.split()) for word in self._all_words}

    def stats(self):
        return {
            "counts": [
                {"count": count, "size": len(self._buckets[count])}
                for count in self.available_counts()
            ],
            "totalWords": len(self._all_words),
        }

    def __len__(self):
        return len(self._all_words)

    def __repr__(self):
        return f"<WordCatalog counts={self.available_counts()} words={len(self)}>"


def parse_source_count(path):
    """Return the syllable count encoded in a source filename, or None."""
    m = _SOURCE_NAME.match(os.path.basename(path))
    if not m:
        return None
    count = int(m.group(1))
    return count if count > 0 else None


def _read_source(path):
    with open(path, "r", encoding="utf-8") as f:
        words = json.load(f)
    if not isinstance(words, list) or not words:
        raise ValueError("expected a non-empty JSON array")
    if not all(isinstance(w, str) and w.strip() for w in words):
        raise ValueError("every entry must be a non-empty string")
    return words


def load_catalog(source_files):
    """Build a catalog from source files, skipping malformed ones.

    Raises EmptyCatalogError when no file is usable.
    """
    buckets = {}
    for path in sorted(source_files):
        count = parse_source_count(path)
        if count is None:
            logger.warning("Skipping %s: name does not encode a syllable count", path)
            continue
        try:
            words = _read_source(path)
        except (OSError, ValueError) as exc:
            logger.warning("Skipping %s: %s", path, exc)
            continue
        buckets.setdefault(count, []).extend(words)
        logger.debug("Loaded %d words for count %d from %s", len(words), count, path)

    if not buckets:
        raise EmptyCatalogError(f"No valid word files among {len(source_files)} candidates")

    catalog = WordCatalog(buckets)
    logger.info("Word catalog ready: %r", catalog)
    return catalog


def load_catalog_dir(directory):
    if not os.path.isdir(directory):
        raise EmptyCatalogError(f"Word data directory not found: {directory}")
    return load_catalog(glob.glob(os.path.join(directory, SOURCE_PATTERN)))
