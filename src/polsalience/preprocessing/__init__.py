"""
Text preprocessing for polsalience.

Provides case normalization and conversion of corpus tables into
document records.
"""

from polsalience.preprocessing.normalizer import (
    Document,
    documents_from_frame,
    iter_documents,
    normalize,
)

__all__ = [
    "Document",
    "documents_from_frame",
    "iter_documents",
    "normalize",
]
