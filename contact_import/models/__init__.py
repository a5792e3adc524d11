"""Domain models for the contact bulk import pipeline.

This package contains the domain model classes shared by the parsers, the
preview builder, the commit engine and the storage backends.
"""

from .contact import DEFAULT_ROLE, IntermediateContact, Role, StoredContact
from .error_record import ErrorRecord
from .import_result import FailureKind, ImportFailure, ImportResult
from .payload import DelimitedText, ImportMethod, ManualRows, RawImportPayload, StructuredDocument
from .row_draft import LastRowDraftError, RowDraft, RowDraftList

__all__ = [
    # Contact models
    "DEFAULT_ROLE",
    "IntermediateContact",
    "Role",
    "StoredContact",
    # Input models
    "DelimitedText",
    "ImportMethod",
    "ManualRows",
    "RawImportPayload",
    "StructuredDocument",
    "LastRowDraftError",
    "RowDraft",
    "RowDraftList",
    # Result models
    "ErrorRecord",
    "FailureKind",
    "ImportFailure",
    "ImportResult",
]
