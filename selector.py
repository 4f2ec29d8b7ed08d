"""Word selection policy on top of the catalog."""
import logging
import random

from errors import EmptyPoolError

logger = logging.getLogger(__name__)

# Re-picks allowed before a same-count word is accepted anyway
MAX_REPICK_ATTEMPTS = 25

_TR_LOWER = str.maketrans({"I": "ı", "İ": "i"})


def turkish_lower(text: str) -> str:
    """Lowercase with Turkish dotted/dotless i rules."""
    return text.translate(_TR_LOWER).lower()


def syllable_count(word: str) -> int:
    """Syllables are stored as space-separated segments of the word."""
    return len(word.split())


def pick_random(pool, rng=random):
    if not pool:
        raise EmptyPoolError()
    return pool[rng.randrange(len(pool))]


def pick_for_count(catalog, count, rng=random):
    return pick_random(catalog.bucket(count), rng)


def pick_unconstrained(catalog, rng=random):
    return pick_random(catalog.all_words(), rng)


class RepeatAvoidingPicker:
    """Unconstrained-mode picker that avoids two consecutive words with the
    same syllable count.

    ``fetch`` is any zero-argument callable returning a word (a catalog pick
    or an HTTP call). ``distinct_counts`` is the set of syllable counts the
    pool can produce; with fewer than two the rule cannot be satisfied and
    repeats are accepted.
    """

    def __init__(self, fetch, distinct_counts, max_attempts=MAX_REPICK_ATTEMPTS):
        self.fetch = fetch
        self.distinct_counts = set(distinct_counts)
        self.max_attempts = max(1, max_attempts)
        self.last_syllable_count = None

    @property
    def can_avoid_repeats(self):
        return len(self.distinct_counts) > 1

    def next_word(self):
        word = self.fetch()
        if self.can_avoid_repeats and self.last_syllable_count is not None:
            attempts = 1
            while syllable_count(word) == self.last_syllable_count:
                if attempts >= self.max_attempts:
                    logger.warning(
                        "Accepting repeated syllable count %d after %d attempts",
                        self.last_syllable_count, attempts,
                    )
                    break
                word = self.fetch()
                attempts += 1
        self.last_syllable_count = syllable_count(word)
        return word

    @classmethod
    def for_catalog(cls, catalog, rng=random, **kwargs):
        return cls(lambda: pick_unconstrained(catalog, rng),
                   catalog.distinct_token_counts(), **kwargs)
