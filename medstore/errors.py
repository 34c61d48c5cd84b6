"""
Error taxonomy shared by the services and the HTTP layer.
Each error carries the status code the global handler answers with.
"""


class MedStoreError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(MedStoreError):
    """Malformed input: bad line item, out-of-range discount, bad upload."""
    status_code = 400


class NotFoundError(MedStoreError):
    """Unknown medicine, transaction or checkout id."""
    status_code = 404


class StateError(MedStoreError):
    """Schedule-H gate driven out of sequence."""
    status_code = 409
