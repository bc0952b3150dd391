"""Content Module - concept catalog and related-concept retrieval."""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class ConceptEntry:
    """A catalog entry describing one learnable concept."""

    id: str
    concept: str
    description: str
    category: str
    difficulty: int  # 1-10
    tags: list[str] = field(default_factory=list)
    prerequisites: list[str] = field(default_factory=list)
    related_concepts: list[str] = field(default_factory=list)


@dataclass
class ConceptMatch:
    """A catalog entry scored against a query."""

    entry: ConceptEntry
    score: float  # 0-1


class IConceptRetriever(Protocol):
    """Interface for related-concept retrieval.

    Used by the recommendation generator to enrich content recommendations.
    """

    async def related_concepts(self, query: str, limit: int = 3) -> list[str]:
        """Get concept ids related to a query.

        Args:
            query: Concept id or free text
            limit: Maximum number of concepts

        Returns:
            Related concept ids, most relevant first, never including the
            queried concept itself

        Raises:
            ConceptRetrievalError: If the backing catalog cannot be queried
        """
        ...
