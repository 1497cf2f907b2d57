"""Error taxonomy for checklist operations.

Every error is scoped to the single shift or template operation that raised
it. Route handlers do not catch these; the exception handler registered in
``app.main`` renders them as ``{"error": code, "detail": message}`` with the
status code carried by the class.
"""


class ChecklistError(Exception):
    """Base class for all domain errors."""

    status_code = 400
    code = "checklist_error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.__class__.__doc__ or self.code
        super().__init__(self.detail)


class NotAuthenticated(ChecklistError):
    """No authenticated identity on the request."""

    status_code = 401
    code = "not_authenticated"


class ProfileNotFound(ChecklistError):
    """Authenticated identity has no user profile."""

    status_code = 403
    code = "profile_not_found"


class PermissionDenied(ChecklistError):
    """Role or restaurant does not permit this operation."""

    status_code = 403
    code = "permission_denied"


class ShiftLocked(ChecklistError):
    """Shift is locked; items cannot be changed."""

    status_code = 409
    code = "shift_locked"


class AlreadyLocked(ChecklistError):
    """Shift has already been submitted and locked."""

    status_code = 409
    code = "already_locked"


class InvalidTimezone(ChecklistError):
    """Unrecognised timezone identifier."""

    code = "invalid_timezone"


class InvalidDate(ChecklistError):
    """Malformed calendar date, expected YYYY-MM-DD."""

    code = "invalid_date"


class InvalidLockTime(ChecklistError):
    """Malformed lock time, expected HH:mm (24h)."""

    code = "invalid_lock_time"


class InvalidTemplate(ChecklistError):
    """Duty template entries must have a non-empty title."""

    code = "invalid_template"


class PersistenceFailure(ChecklistError):
    """The store rejected or failed to apply a write."""

    status_code = 503
    code = "persistence_failure"
