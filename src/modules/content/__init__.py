"""Content Module - concept catalog and related-concept retrieval.

Usage:
    # Recommended: Use service registry (respects feature flags)
    from src.shared.service_registry import get_service_registry
    retriever = get_service_registry().get_concept_retriever()

    # Direct access
    from src.modules.content import ConceptIndex
    index = ConceptIndex()
"""

from src.modules.content.concept_index import DEFAULT_CATALOG, ConceptIndex
from src.modules.content.interface import ConceptEntry, ConceptMatch, IConceptRetriever

__all__ = [
    # Interface types
    "ConceptEntry",
    "ConceptMatch",
    "IConceptRetriever",
    # Implementations
    "ConceptIndex",
    "DEFAULT_CATALOG",
]
