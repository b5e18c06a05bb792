"""
errors.py — Error taxonomy
Every service failure is one of these; main.py renders them as
{"message": ..., "error": ...} with the matching status code.
"""


class NoteNovaError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"message": self.message, "error": type(self).__name__}


class ValidationError(NoteNovaError):
    status_code = 400

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class Conflict(NoteNovaError):
    status_code = 409


class Unauthorized(NoteNovaError):
    status_code = 401


class InvalidToken(Unauthorized):
    status_code = 403


class NotFound(NoteNovaError):
    status_code = 404


class UnsupportedFormat(NoteNovaError):
    status_code = 400


class ExtractionError(NoteNovaError):
    status_code = 400


class AIServiceError(NoteNovaError):
    status_code = 502
