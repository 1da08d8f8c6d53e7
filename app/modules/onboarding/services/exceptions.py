"""
Exceptions raised by the onboarding engines.

Callers only ever see ``NoCredentialError`` and ``ServiceError``.
``MalformedResponse`` is internal to the generation client and is converted
to ``ServiceError`` before it leaves it.
"""


class OnboardingError(Exception):
    """Base exception for onboarding failures.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary with additional context about the error
    """

    code = "ONBOARDING_ERROR"

    def __init__(self, message: str, context: dict = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class NoCredentialError(OnboardingError):
    """No access credential is configured for the generation service.

    Recoverable: the user can supply a key and try again.
    """

    code = "NO_API_KEY"


class ServiceError(OnboardingError):
    """The generation service failed, timed out, returned nothing, or
    returned content that does not match the requested shape."""

    code = "API_ERROR"


class MalformedResponse(OnboardingError):
    """A candidate value does not conform to the requested shape."""

    code = "MALFORMED_RESPONSE"


class InvalidTransition(OnboardingError):
    """A session operation was attempted from the wrong phase."""

    code = "INVALID_TRANSITION"
