"""Error types shared by the QR app.

Every error carries a short message that is safe to show to the user.
"""


class QRAppError(Exception):
    user_message = "Something went wrong. Please try again."

    def __init__(self, message="", user_message=None):
        super().__init__(message or self.user_message)
        if user_message:
            self.user_message = user_message


class ValidationError(QRAppError, ValueError):
    """Bad input, raised before any remote call is made."""

    def __init__(self, message):
        super().__init__(message, user_message=message)


class RemoteServiceError(QRAppError):
    """Any failure reported by the auth, database or storage backend."""

    user_message = "The server could not complete the request."


class EncodingFailed(QRAppError):
    user_message = "Failed to generate QR code"


class InvalidCredentials(QRAppError):
    user_message = "Invalid email or password. Please try again."


class ProfileCreationFailed(QRAppError):
    user_message = "Account could not be created. Please try again."
