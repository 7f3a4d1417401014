"""GhostGuard exception hierarchy.

Every error carries the machine-readable ``code`` returned to callers in the
``error`` (or ``reason``) field and the HTTP status it maps to.
"""


class GhostGuardError(Exception):
    """Base exception for all GhostGuard errors."""

    status_code = 500

    def __init__(self, message: str = "", code: str = "SERVER_ERROR", status_code: int | None = None):
        self.message = message
        self.code = code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


# ── Client input ──


class MissingFieldsError(GhostGuardError):
    """Raised when the caller omitted required input."""

    status_code = 400

    def __init__(self, message: str = "Missing required fields", code: str = "MISSING_FIELDS"):
        super().__init__(message, code=code)


class InvalidIdentifiersError(GhostGuardError):
    """Raised when a ban check receives identifiers that are not a list."""

    status_code = 400

    def __init__(self, message: str = "identifiers must be an array"):
        super().__init__(message, code="INVALID_IDENTIFIERS")


class InvalidImageDataError(GhostGuardError):
    """Raised when evidence is not a base64 image data URI."""

    status_code = 400

    def __init__(self, message: str = "Expected data:image/<type>;base64,<payload>"):
        super().__init__(message, code="INVALID_IMAGE_DATA")


class InvalidDetectionKeyError(GhostGuardError):
    status_code = 400

    def __init__(self, message: str = "Unknown detection key"):
        super().__init__(message, code="INVALID_DETECTION_KEY")


# ── Identity ──


class UnauthorizedError(GhostGuardError):
    """Raised when a token is absent or resolves to no identity."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED")


class ForbiddenError(GhostGuardError):
    """Raised when a token resolves to a different tenant than the target."""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, code="FORBIDDEN")


# ── Lookups ──


class NotFoundError(GhostGuardError):
    status_code = 404

    def __init__(self, message: str = "Not found", code: str = "NOT_FOUND"):
        super().__init__(message, code=code)


class LicenseNotFoundError(NotFoundError):
    """Raised when an operation references a license key that does not exist."""

    def __init__(self, message: str = "License not found"):
        super().__init__(message, code="LICENSE_NOT_FOUND")


class BanNotFoundError(NotFoundError):
    def __init__(self, message: str = "Ban not found"):
        super().__init__(message, code="NOT_FOUND")


class FeatureDisabledError(NotFoundError):
    """Raised when a deprecated endpoint has been switched off."""

    def __init__(self, message: str = "Endpoint disabled"):
        super().__init__(message, code="NOT_FOUND")


# ── License verification rejections (reported as {"valid": false, "reason": code}) ──


class LicenseRejectedError(GhostGuardError):
    status_code = 200


class UnknownLicenseError(LicenseRejectedError):
    def __init__(self, message: str = "License not found"):
        super().__init__(message, code="NOT_FOUND")


class LicenseInactiveError(LicenseRejectedError):
    """Raised when a license status is anything but ACTIVE; the status is the reason."""

    def __init__(self, status: str):
        super().__init__(f"License is {status}", code=status)


class LicenseExpiredError(LicenseRejectedError):
    def __init__(self, message: str = "License has expired"):
        super().__init__(message, code="EXPIRED")


class HwidMismatchError(LicenseRejectedError):
    def __init__(self, message: str = "License is bound to another device"):
        super().__init__(message, code="HWID_MISMATCH")


# ── Collaborators ──


class UploadFailedError(GhostGuardError):
    def __init__(self, message: str = "Evidence upload failed"):
        super().__init__(message, code="UPLOAD_FAILED")


class PublicUrlFailedError(GhostGuardError):
    def __init__(self, message: str = "Could not resolve public evidence URL"):
        super().__init__(message, code="PUBLIC_URL_FAILED")
