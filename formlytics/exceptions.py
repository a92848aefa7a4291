class FormNotFoundError(Exception):
    """Raised when a form does not exist, is not owned by the caller, or is not accepting responses."""


class FormExpiredError(Exception):
    """Raised when a response is submitted after the form's expiry."""


class ResponseLimitError(Exception):
    """Raised when a form has already collected its maximum number of responses."""


class DuplicateResponseError(Exception):
    """Raised when a form disallows multiple responses and the respondent already answered."""


class InvalidAnswerError(Exception):
    """Raised when a submitted answer references an unknown question or leaves a required one empty."""


class StoreError(Exception):
    """Raised when the data file cannot be read or written."""
