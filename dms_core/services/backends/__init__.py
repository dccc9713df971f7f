from .base import DocumentBackend, ProgressCallback, UploadFile, ensure_upload_file
from .mock_backend import MockBackend
from .real_backend import RealBackend

__all__ = [
    "DocumentBackend",
    "MockBackend",
    "ProgressCallback",
    "RealBackend",
    "UploadFile",
    "ensure_upload_file",
]
