"""
Booking Reference Numbers

References look like BK-2025-0008: a per-year sequence, one past the
highest number already issued that year. Correct only when the caller
holds the year's sequence lock while reading existing references and
inserting the new booking.
"""

import re
from typing import Iterable

REFERENCE_PREFIX = 'BK'
SEQUENCE_WIDTH = 4


def reference_prefix(year: int) -> str:
    return f"{REFERENCE_PREFIX}-{year}-"


def parse_sequence(reference: str, year: int) -> int | None:
    """Sequence number of a reference issued in year, None for anything else"""
    match = re.fullmatch(re.escape(reference_prefix(year)) + r'(\d+)', reference or '')
    if not match:
        return None
    return int(match.group(1))


def format_reference(year: int, sequence: int) -> str:
    return f"{reference_prefix(year)}{sequence:0{SEQUENCE_WIDTH}d}"


def next_reference(year: int, existing_references: Iterable[str]) -> str:
    """
    Next reference for year

    Malformed references and references from other years are ignored.
    The first reference of a year is BK-<year>-0001.
    """
    sequences = [
        sequence for sequence in
        (parse_sequence(reference, year) for reference in existing_references)
        if sequence is not None
    ]
    return format_reference(year, max(sequences, default=0) + 1)
