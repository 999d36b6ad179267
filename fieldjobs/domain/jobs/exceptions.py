"""Job domain errors. Each carries the HTTP status the API layer reports it with."""


class JobDomainError(Exception):
    """Base class for failures surfaced to the caller verbatim"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTransition(JobDomainError):
    """Requested status is not a legal edge from the current status"""

    status_code = 409

    def __init__(self, current: str, requested: str, message: str | None = None):
        self.current = current
        self.requested = requested
        super().__init__(message or f"cannot transition from {current} to {requested}")


class InvalidState(JobDomainError):
    """Lifecycle operation called from a status it does not accept"""

    status_code = 409


class AlreadyTerminal(JobDomainError):
    """Cancellation attempted on a completed or cancelled job"""

    status_code = 409

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"cannot cancel a {status} job")


class NotDeletable(JobDomainError):
    """Soft delete attempted on a job that already left pending"""

    status_code = 409

    def __init__(self, status: str):
        self.status = status
        super().__init__("only pending jobs can be deleted")


class InvalidCadence(JobDomainError):
    """Unrecognized recurrence frequency"""

    status_code = 422

    def __init__(self, cadence: str):
        self.cadence = cadence
        super().__init__(f"unsupported frequency: {cadence}")


class SchedulingConflictError(JobDomainError):
    """A crew or equipment item is already committed during the requested window"""

    status_code = 409


class JobNotFound(JobDomainError):
    status_code = 404

    def __init__(self, what: str = "job", message: str | None = None):
        super().__init__(message or f"{what} not found")


class JobValidationError(JobDomainError):
    status_code = 422
