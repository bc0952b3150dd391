"""Keyword-based concept index with a concept relationship graph.

Usage:
    from src.modules.content.concept_index import ConceptIndex

    index = ConceptIndex()
    related = await index.related_concepts("react", limit=3)
"""

import logging
import re

from src.modules.content.interface import ConceptEntry, ConceptMatch, IConceptRetriever

logger = logging.getLogger(__name__)

# Web development starter catalog
DEFAULT_CATALOG: tuple[ConceptEntry, ...] = (
    ConceptEntry(
        id="web-dev-basics-1",
        concept="html",
        description="HTML is the foundation of web development. It provides structure to web pages using elements and tags.",
        category="web-development",
        difficulty=1,
        tags=["html", "web", "frontend", "markup", "structure"],
        related_concepts=["css", "javascript", "dom"],
    ),
    ConceptEntry(
        id="web-dev-basics-2",
        concept="css",
        description="CSS controls the visual presentation of HTML elements. It handles layout, colors, fonts, and responsive design.",
        category="web-development",
        difficulty=2,
        tags=["css", "styling", "layout", "responsive", "design"],
        prerequisites=["html"],
        related_concepts=["html", "flexbox", "grid", "responsive-design"],
    ),
    ConceptEntry(
        id="web-dev-basics-3",
        concept="javascript",
        description="JavaScript adds interactivity to web pages. It can manipulate the DOM, handle events, and make API calls.",
        category="web-development",
        difficulty=3,
        tags=["javascript", "programming", "interactivity", "dom", "events"],
        prerequisites=["html", "css"],
        related_concepts=["dom", "events", "ajax", "es6"],
    ),
    ConceptEntry(
        id="react-intro-1",
        concept="react",
        description="React is a JavaScript library for building user interfaces. It uses components and JSX syntax.",
        category="react",
        difficulty=4,
        tags=["react", "components", "jsx", "ui", "library"],
        prerequisites=["javascript", "html", "css"],
        related_concepts=["components", "jsx", "props", "state"],
    ),
    ConceptEntry(
        id="react-hooks-1",
        concept="react-hooks",
        description="React Hooks like useState and useEffect allow functional components to use state and lifecycle methods.",
        category="react",
        difficulty=5,
        tags=["react", "hooks", "usestate", "useeffect", "functional-components"],
        prerequisites=["react", "components"],
        related_concepts=["state", "effects", "lifecycle"],
    ),
    ConceptEntry(
        id="nextjs-intro-1",
        concept="nextjs",
        description="Next.js is a React framework that provides server-side rendering, routing, and API routes out of the box.",
        category="nextjs",
        difficulty=6,
        tags=["nextjs", "ssr", "routing", "api", "framework"],
        prerequisites=["react", "javascript"],
        related_concepts=["ssr", "routing", "api-routes"],
    ),
    ConceptEntry(
        id="typescript-intro-1",
        concept="typescript",
        description="TypeScript adds static type checking to JavaScript, helping catch errors early and improving code quality.",
        category="typescript",
        difficulty=4,
        tags=["typescript", "types", "static-analysis", "javascript"],
        prerequisites=["javascript"],
        related_concepts=["types", "interfaces", "generics"],
    ),
)

MIN_MATCH_SCORE = 0.1
GRAPH_BOOST_PER_HIT = 0.1
MAX_GRAPH_BOOST = 0.3

_TOKEN_SPLIT = re.compile(r"[\s_]+")


class ConceptIndex(IConceptRetriever):
    """In-memory concept catalog searchable by keyword.

    Related concepts come from the catalog's relationship graph (edges are
    stored in both directions) and, for free-text queries, from the
    best keyword matches.
    """

    def __init__(self, entries: list[ConceptEntry] | tuple[ConceptEntry, ...] = DEFAULT_CATALOG) -> None:
        self._entries: dict[str, ConceptEntry] = {entry.concept: entry for entry in entries}
        self._graph: dict[str, list[str]] = {}
        self._build_graph()
        logger.info(f"ConceptIndex initialized with {len(self._entries)} concepts")

    def _build_graph(self) -> None:
        for entry in self._entries.values():
            for related in entry.related_concepts:
                self._link(entry.concept, related)
                self._link(related, entry.concept)

    def _link(self, source: str, target: str) -> None:
        neighbours = self._graph.setdefault(source, [])
        if target not in neighbours:
            neighbours.append(target)

    @property
    def concepts(self) -> list[str]:
        return list(self._entries)

    def get(self, concept: str) -> ConceptEntry | None:
        return self._entries.get(concept.strip().lower())

    def search(self, query: str, limit: int = 5) -> list[ConceptMatch]:
        """Score catalog entries against a free-text query.

        Score is the share of query keywords found in the entry's text,
        plus a small boost for keywords that hit its related concepts.

        Args:
            query: Search text
            limit: Maximum results

        Returns:
            Matches sorted by score, best first
        """
        keywords = _tokenize(query)
        if not keywords:
            return []

        scored: list[ConceptMatch] = []
        for entry in self._entries.values():
            text = " ".join([entry.concept, entry.description, *entry.tags]).lower()
            keyword_hits = sum(1 for kw in keywords if kw in text)
            keyword_score = keyword_hits / len(keywords)

            boost = 0.0
            for related in self._graph.get(entry.concept, []):
                for kw in keywords:
                    if kw in related or related in kw:
                        boost += GRAPH_BOOST_PER_HIT
            score = min(1.0, keyword_score + min(boost, MAX_GRAPH_BOOST))

            if score > MIN_MATCH_SCORE:
                scored.append(ConceptMatch(entry=entry, score=score))

        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[:limit]

    async def related_concepts(self, query: str, limit: int = 3) -> list[str]:
        normalized = query.strip().lower()
        if not normalized or limit <= 0:
            return []

        excluded = {normalized, *_tokenize(normalized)}
        candidates = list(self._graph.get(normalized, []))
        for match in self.search(normalized):
            candidates.append(match.entry.concept)
            candidates.extend(match.entry.related_concepts)

        related: list[str] = []
        for concept in candidates:
            if concept not in excluded and concept not in related:
                related.append(concept)
            if len(related) >= limit:
                break

        logger.debug(f"Related concepts for '{normalized}': {related}")
        return related


def _tokenize(text: str) -> list[str]:
    return [token for token in _TOKEN_SPLIT.split(text.lower()) if token]
