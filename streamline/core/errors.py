"""Error taxonomy shared by the form endpoints and the mail transports."""

MAIL_FAILED_MESSAGE = "Email failed (check App Password)."


class SubmissionError(Exception):
    """Base for errors that end a form submission with a JSON reply."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormValidationError(SubmissionError):
    """The client sent a missing, empty or malformed field."""

    status_code = 400


class DispatchError(SubmissionError):
    """The mail collaborator could not deliver the message.

    The public message is fixed; the real cause is kept in ``detail`` and
    chained with ``raise ... from`` so it only ever reaches the logs.
    """

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(MAIL_FAILED_MESSAGE)
        self.detail = detail

    def __str__(self) -> str:
        return self.detail


class ConfigurationError(Exception):
    """Mail transport is misconfigured or unreachable at startup."""
