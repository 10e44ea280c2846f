"""Document indexing for scopels."""
from .document_index import DocumentIndex

__all__ = ['DocumentIndex']
