"""Error taxonomy for the clip render pipeline.

Every error carries the HTTP status it maps to at the API boundary.
TranscriptionServiceError is recovered locally and never reaches a caller.
"""


class ClipRenderError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(ClipRenderError):
    status_code = 401


class ValidationError(ClipRenderError):
    status_code = 400


class ConfigurationError(ClipRenderError):
    status_code = 503


class TranscriptionServiceError(ClipRenderError):
    status_code = 502


class RenderSubmissionError(ClipRenderError):
    status_code = 502


class UnexpectedError(ClipRenderError):
    status_code = 500


class NotFoundError(ClipRenderError):
    status_code = 404
