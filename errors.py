# errors.py
from typing import Any, Optional


class VeoMakerError(Exception):
    pass


class ValidationError(VeoMakerError):
    """Request payload rejected before a job is created."""


class AuthError(VeoMakerError):
    pass


class ProviderCallError(VeoMakerError):
    """
    Network failure, timeout or non-2xx reply from the generation provider
    (or from the host serving the generated asset).

    `detail` holds the most specific error information available: the
    provider's parsed error body when it sent one, otherwise the message.
    """

    def __init__(self, message: str, *, detail: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.detail = detail if detail is not None else message
        self.status_code = status_code


class UnrecognizedResponseShape(VeoMakerError):
    def __init__(self, body: Any):
        super().__init__("Could not parse provider response; check debug file.")
        self.body = body


class StorageError(VeoMakerError):
    pass


class NotFound(StorageError):
    pass


class CallbackDeliveryError(VeoMakerError):
    pass
