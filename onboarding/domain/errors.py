"""
Onboarding errors.

Every error carries a stable code, an internal message, a message that is
safe to show to the user, and whether the client may simply retry.
"""


class OnboardingError(Exception):
    code = "ONBOARDING_ERROR"
    http_status = 500
    retryable = False
    default_user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None, user_message: str | None = None):
        self.message = message or self.default_user_message
        self.user_message = user_message or self.default_user_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.user_message,
            "retryable": self.retryable,
        }


class Unauthenticated(OnboardingError):
    code = "UNAUTHENTICATED"
    http_status = 401
    default_user_message = "You must be signed in to continue"


class RoleAlreadySet(OnboardingError):
    code = "ROLE_ALREADY_SET"
    http_status = 409
    default_user_message = "Role already set"


class RoleMismatch(OnboardingError):
    code = "ROLE_MISMATCH"
    http_status = 403
    default_user_message = "This page is not available for your role"


class ProfileAlreadyExists(OnboardingError):
    code = "PROFILE_ALREADY_EXISTS"
    http_status = 409
    default_user_message = "Your profile is already set up"


class ProfileCreateFailed(OnboardingError):
    code = "PROFILE_CREATE_FAILED"
    http_status = 503
    retryable = True
    default_user_message = "Failed to set up your profile. Please try again."


class StoreUnavailable(OnboardingError):
    code = "STORE_UNAVAILABLE"
    http_status = 503
    retryable = True
    default_user_message = "Service is temporarily unavailable. Please try again."
