"""
Error taxonomy.

Every error the API can report derives from PortalError and carries the HTTP
status it maps to. main.py turns them into {"success": false, "message": ...}.
"""


class PortalError(Exception):
    status_code = 500
    default_message = "Internal Server Error."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortalError):
    """Missing or invalid input."""
    status_code = 400
    default_message = "All fields are required."


class NotFoundError(PortalError):
    status_code = 404
    default_message = "Resource not found."


class DuplicateError(PortalError):
    status_code = 400
    default_message = "You have already applied for this job."


class MissingResumeError(PortalError):
    status_code = 400
    default_message = "Please upload your resume."


class UnsupportedFormatError(PortalError):
    """A resume file whose extension has no upload directive."""
    status_code = 400

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unsupported file format: {extension}")


class StorageServiceError(PortalError):
    """Upload to / delete from the content storage service failed."""
    status_code = 500
    default_message = "Failed to upload resume."


class AuthenticationError(PortalError):
    status_code = 401
    default_message = "User is not authenticated."


class ForbiddenError(PortalError):
    status_code = 403
    default_message = "You are not allowed to access this resource."


class FileTooLargeError(PortalError):
    status_code = 413
    default_message = "File too large."


# Names used by the ingestion contract
ClassificationError = UnsupportedFormatError
IngestionError = StorageServiceError
