"""
Error taxonomy for the chunking and batch progress engine.

All of these are expected, recoverable conditions raised synchronously to
the caller. ``status_code`` is a hint for whatever transport sits on top.
"""


class TextProcessingError(Exception):
    """Base error for the text processing engine"""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInputError(TextProcessingError):
    """Empty/oversized text or malformed split configuration"""
    status_code = 400


class CapacityExceededError(TextProcessingError):
    """Admission denied: too many active batches"""
    status_code = 429


class BatchNotFoundError(TextProcessingError):
    """Operation referenced an unknown batch id"""
    status_code = 404

    def __init__(self, batch_id: str):
        super().__init__(f"Batch not found: {batch_id}")
        self.batch_id = batch_id


class InvalidStateError(TextProcessingError):
    """Operation not allowed in the batch's current status"""
    status_code = 409
