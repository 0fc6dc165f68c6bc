"""
Domain package for the TimeTagger client.

Exports the domain models handed to callers. The wire models live in
`timetagger_client.domain.wire` and stay internal to the client.
"""

from timetagger_client.domain.models import HIDDEN_MARKER, RUNNING_THRESHOLD, Record, Setting

__all__ = [
    "Record",
    "Setting",
    "HIDDEN_MARKER",
    "RUNNING_THRESHOLD",
]
