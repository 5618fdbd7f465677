"""Domain exceptions. Each carries the HTTP status it is rendered with."""


class HRMError(Exception):
    status_code = 400
    default_message = "Bad request"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(HRMError):
    default_message = "Invalid request"


class NotAuthenticated(HRMError):
    status_code = 401
    default_message = "Not authenticated"


class NotAuthorized(HRMError):
    status_code = 403
    default_message = "Not authorized"


class SignupDisabled(HRMError):
    status_code = 403
    default_message = "Signup is currently disabled"


class NotFound(HRMError):
    status_code = 404
    default_message = "Not found"


class DuplicateResource(HRMError):
    default_message = "Resource already exists"


class ProtectedResource(HRMError):
    default_message = "Protected roles cannot be deleted"


# attendance

class AlreadyCheckedIn(HRMError):
    default_message = "Already checked in today"


class NonWorkingDay(HRMError):
    default_message = "Cannot check in today"


class NoCheckIn(HRMError):
    default_message = "No check-in found for today"


class AlreadyCheckedOut(HRMError):
    default_message = "Already checked out today"


class DuplicatePendingCorrection(HRMError):
    default_message = "A correction request for this record is already pending"


class AlreadyReviewed(HRMError):
    default_message = "This request has already been reviewed"


# leave

class InvalidRange(HRMError):
    default_message = "End date must be after start date"


class InsufficientBalance(HRMError):
    default_message = "Insufficient leave balance"


class AlreadyProcessed(HRMError):
    default_message = "Leave request already processed"


# org

class ConflictingDayType(HRMError):
    default_message = "This date already has a conflicting day type"
