"""Typed failures of the upstream AI service."""


class AIServiceError(RuntimeError):
    """Base error for anything that goes wrong calling the AI model.

    ``status_code`` is the HTTP status the API answers with.
    """

    status_code = 502

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AINotConfiguredError(AIServiceError):
    status_code = 503


class AINetworkError(AIServiceError):
    status_code = 502


class AIRateLimitError(AIServiceError):
    status_code = 429


class AIAuthError(AIServiceError):
    status_code = 502


class AIResponseError(AIServiceError):
    status_code = 502
