"""
equiprent Testing Helpers

Recording and failure-injecting store fakes.
"""

from .fakes import CallLog, RecordingDocumentStore, RecordingObjectStore

__all__ = [
    "CallLog",
    "RecordingDocumentStore",
    "RecordingObjectStore",
]
