"""Error taxonomy shared by the catalog, the session store and the API.

Every error carries the HTTP status the API answers with, so request handlers
can let them propagate to the app-level error handler.
"""


class TrainerError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {"error": self.message}


# ── Catalog ───────────────────────────────────────────────────────────────────

class LoadError(TrainerError):
    message = "Word data could not be loaded"


class EmptyCatalogError(LoadError):
    message = "No valid word files found"


class UnknownBucketError(TrainerError):
    status_code = 404
    message = "No words of that syllable count"

    def __init__(self, count):
        super().__init__(f"No words of syllable count {count}")
        self.count = count


class EmptyPoolError(TrainerError):
    message = "Word list empty"


# ── Requests / storage ────────────────────────────────────────────────────────

class InvalidRequestError(TrainerError):
    status_code = 400
    message = "Invalid request"


class PersistError(TrainerError):
    message = "Session could not be stored"


class InvalidRecordError(PersistError):
    status_code = 400
    message = "Session record is missing required fields"


class NotFoundError(TrainerError):
    status_code = 404
    message = "Session not found"


class ReviewLogError(TrainerError):
    message = "Review log unavailable"
