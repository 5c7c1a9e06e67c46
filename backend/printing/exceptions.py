from core_backend.exceptions import NotFoundError, StateConflictError


class PrintJobNotFound(NotFoundError):
    default_code = "print_job_not_found"
    default_message = "Print job not found."


class InvalidPrintJobState(StateConflictError):
    default_code = "invalid_print_job_state"
