# producttable/services/exceptions.py

class ServiceException(Exception):
    """Base exception for all service layer errors."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class NotFoundError(ServiceException):
    """Raised when a requested table (or other record) does not exist or is not visible to the caller."""
    pass

class PermissionDeniedError(ServiceException):
    """Raised when the caller lacks the rights for an operation (e.g. editing without an operator)."""
    pass

class RevisionConflictError(ServiceException):
    """Raised when a save carries an expected revision that no longer matches the stored one."""
    def __init__(self, message: str, current_revision: int):
        self.current_revision = current_revision
        super().__init__(message)
