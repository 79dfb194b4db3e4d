class AssignmentError(Exception):
    status_code = 500
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(AssignmentError):
    status_code = 404
    default_message = "Not found."


class Forbidden(AssignmentError):
    status_code = 403
    default_message = "Not allowed."


class InternalError(AssignmentError):
    status_code = 500
    default_message = "Internal error."


class ValidationFailed(AssignmentError):
    status_code = 400
    default_message = "Invalid data."

    def __init__(self, errors: dict | None = None, message: str | None = None):
        self.errors = errors or {}
        super().__init__(message)
