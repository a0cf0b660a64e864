from enum import Enum


class OAuthProviders(str, Enum):
    """Supported OAuth providers for authentication."""

    GOOGLE = "google"
    GITHUB = "github"


class LoginStep(str, Enum):
    """Steps of a single OAuth login attempt."""

    START = "start"
    REDIRECTED = "redirected"
    CALLBACK_RECEIVED = "callback_received"
    STATE_VALIDATED = "state_validated"
    EXCHANGED = "exchanged"
    SESSION_ISSUED = "session_issued"
    DONE = "done"
    # Terminal error steps
    REJECTED = "rejected"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (LoginStep.DONE, LoginStep.REJECTED, LoginStep.FAILED)
