"""
Action record storage.

This module provides:
- initial_records: fresh record map holding @@INIT under id 0
- with_record: copy-on-write insertion of a new record
"""

from .records import ActionsById, initial_records, with_record

__all__ = [
    "ActionsById",
    "initial_records",
    "with_record",
]
