"""Package specific exception hierarchy."""


class GroundedGeminiError(Exception):
    """Base exception for grounded_gemini package."""


class AuthError(GroundedGeminiError):
    """Raised when a credential cannot be parsed into the shape a provider needs."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: invalid credentials: {message}")
        self.provider = provider


class HttpError(GroundedGeminiError):
    """Represents a non-2xx response from the generation endpoint."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"API error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


class StreamError(GroundedGeminiError):
    """Raised when a response carries no readable event stream."""

    def __init__(self, message: str = "No response body") -> None:
        super().__init__(message)
