from enum import Enum


class ErrorKind(str, Enum):
    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    READ_ERROR = "read_error"
    FETCH_ERROR = "fetch_error"

    AUTH_ERROR = "auth_error"
    RATE_LIMITED = "rate_limited"
    INVALID_REQUEST = "invalid_request"
    UNKNOWN = "unknown"

    NO_IMAGE_PRODUCED = "no_image_produced"


UNSUPPORTED_TYPE_MESSAGE = "Unsupported file type. Please upload a JPEG, PNG, or WebP image."
READ_ERROR_MESSAGE = "Failed to process image. Please try another file."
FETCH_ERROR_MESSAGE = "Could not load the sample image. Please try another one."
MISSING_IMAGES_MESSAGE = "Please upload both an image of a person and an item of clothing."
NO_IMAGE_MESSAGE = "The AI could not generate an image. Please try again with different images."

GENERATION_MESSAGES = {
    ErrorKind.AUTH_ERROR: "Invalid API Key: Please ensure your key is correct and has permissions.",
    ErrorKind.RATE_LIMITED: "Rate Limit Exceeded: You have made too many requests. Please wait and try again.",
    ErrorKind.INVALID_REQUEST: (
        "Invalid Request: The images may be corrupted or in an unsupported format. "
        "Please try different images."
    ),
    ErrorKind.UNKNOWN: "AI Generation Failed: An unexpected error occurred. Please try again later.",
}


def too_large_message(max_mb: int) -> str:
    return f"File is too large. Maximum size is {max_mb}MB."


class TryOnError(Exception):
    """Base error carrying a kind and a message safe to show to the user."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class UploadError(TryOnError):
    """Validation, read or sample-download failure. Never reaches the generation client."""


class GenerationError(TryOnError):
    """Failure of the remote generation call, already mapped to a user-facing message."""

    @classmethod
    def of(cls, kind: ErrorKind) -> "GenerationError":
        return cls(kind, GENERATION_MESSAGES[kind])


class TransitionError(Exception):
    """Intent is not valid for the current view state."""
