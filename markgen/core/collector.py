"""Gathers discovery results into the ordered set handed to the emitter."""

from typing import Iterable, List, Optional

from .metadata import ClassMetadata


def collect(results: Iterable[Optional[ClassMetadata]]) -> List[ClassMetadata]:
    """
    Keep every discovered class, in discovery order.

    Absent results are dropped. No deduplication, sorting or validation is
    applied.
    """
    return [metadata for metadata in results if metadata is not None]
