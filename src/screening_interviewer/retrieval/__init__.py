"""
Retrieval module for job description documents.

Provides the document stores that serve job-description text by identifier.
"""

from screening_interviewer.retrieval.job_store import (
    FileJobDescriptionStore,
    HttpJobDescriptionStore,
    JobDescriptionNotFound,
    JobDescriptionProvider,
    JobDescriptionStoreBase,
    JobDescriptionStoreError,
)

__all__ = [
    "FileJobDescriptionStore",
    "HttpJobDescriptionStore",
    "JobDescriptionNotFound",
    "JobDescriptionProvider",
    "JobDescriptionStoreBase",
    "JobDescriptionStoreError",
]
