"""Error kinds raised across the document pipeline.

Only `ReadError`, `StorageError`, `UploadError` and `DocumentNotFound` ever
reach a caller. `ModelCallError` and `MalformedModelResponse` are recovered
inside the synthesizer.
"""
from __future__ import annotations


class DocInsightError(Exception):
    """Base class; the message is what gets shown to users."""


class ReadError(DocInsightError):
    """Uploaded bytes could not be turned into text."""


class StorageError(DocInsightError):
    """Blob or relational store operation failed."""


class UploadError(DocInsightError):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class DocumentNotFound(DocInsightError):
    pass


class InvalidTransition(DocInsightError):
    """Attempted a processing-state change the lifecycle does not allow."""


class ModelCallError(DocInsightError):
    """Network, auth or timeout failure talking to the model endpoint."""


class MalformedModelResponse(DocInsightError):
    """Model replied, but not with a decodable insight object."""
