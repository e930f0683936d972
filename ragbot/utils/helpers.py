"""
Utility helper functions.
"""
from typing import Dict, List

from ..schemas import RetrievalResult


def group_chunks_by_document(chunks: List[RetrievalResult]) -> Dict[str, List[RetrievalResult]]:
    """
    Group retrieved chunks per source file, in reading order.

    Files are ordered by name and chunks inside a file by chunk_index, so the
    context handed to the model reads like the original documents.

    Example:
        >>> group_chunks_by_document([b_3, a_1, b_0])
        {"a.pdf": [a_1], "b.pdf": [b_0, b_3]}
    """
    ordered = sorted(chunks, key=lambda c: (c.filename, c.chunk_index))
    groups: Dict[str, List[RetrievalResult]] = {}
    for chunk in ordered:
        groups.setdefault(chunk.filename, []).append(chunk)
    return groups

