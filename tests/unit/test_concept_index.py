"""Tests for ConceptIndex."""

import pytest

from src.modules.content import DEFAULT_CATALOG, ConceptEntry, ConceptIndex


class TestConceptIndex:
    """Tests for ConceptIndex."""

    @pytest.fixture
    def index(self) -> ConceptIndex:
        return ConceptIndex()

    def test_default_catalog_loaded(self, index):
        assert index.concepts == [entry.concept for entry in DEFAULT_CATALOG]
        assert index.get("React").id == "react-intro-1"
        assert index.get("recursion") is None

    def test_search_ranks_by_keyword_share(self, index):
        matches = index.search("react hooks")

        assert matches[0].entry.concept == "react-hooks"
        assert all(m.score > 0.1 for m in matches)
        assert [m.score for m in matches] == sorted((m.score for m in matches), reverse=True)

    def test_search_respects_limit(self, index):
        assert len(index.search("javascript", limit=2)) == 2

    def test_search_blank_query(self, index):
        assert index.search("   ") == []

    @pytest.mark.asyncio
    async def test_related_from_graph(self, index):
        assert await index.related_concepts("html") == ["css", "javascript", "dom"]

    @pytest.mark.asyncio
    async def test_related_uses_reverse_edges(self, index):
        # "state" is only listed as a related concept of react and react-hooks
        related = await index.related_concepts("state", limit=5)

        assert "react" in related
        assert "react-hooks" in related
        assert "state" not in related

    @pytest.mark.asyncio
    async def test_related_excludes_query(self, index):
        related = await index.related_concepts("TypeScript", limit=10)

        assert "typescript" not in related
        assert related[:3] == ["types", "interfaces", "generics"]

    @pytest.mark.asyncio
    async def test_unknown_concept(self, index):
        assert await index.related_concepts("recursion") == []

    @pytest.mark.asyncio
    async def test_limit(self, index):
        assert await index.related_concepts("css", limit=0) == []
        assert len(await index.related_concepts("css", limit=2)) == 2

    @pytest.mark.asyncio
    async def test_custom_catalog(self):
        index = ConceptIndex([
            ConceptEntry(
                id="algo-1",
                concept="recursion",
                description="A function calling itself on a smaller input.",
                category="algorithms",
                difficulty=3,
                tags=["recursion", "functions"],
                related_concepts=["base-case", "call-stack"],
            ),
        ])

        assert await index.related_concepts("recursion") == ["base-case", "call-stack"]
        assert await index.related_concepts("call-stack") == ["recursion"]
