"""Unit tests for retrieval.retriever module."""

import copy

import numpy as np
import pytest

from askdocs.errors import DimensionMismatchError, DocumentUnreadableError, StaleDocumentError
from askdocs.retrieval.indexer import build_index
from askdocs.retrieval.retriever import Retriever, retrieve
from askdocs.retrieval.store import VectorIndex
from askdocs.retrieval.vectors import distance


@pytest.fixture
def corpus(make_document):
    """Five one-heading documents with distinct 3-d embeddings."""
    paths = [
        make_document(f"doc{i}.json", f"intro {i}<h1>Part</h1>body number {i}")
        for i in range(5)
    ]
    rng = np.random.default_rng(0)
    vectors = {p: rng.random((2, 3)) for p in paths}
    calls = iter(paths)

    def embed(texts):
        return vectors[next(calls)]

    return build_index(paths, embed)


@pytest.mark.unit
class TestRetriever:
    """Tests for Retriever ranking and context packing."""

    def test_query_ranks_closest_document_first(self, sample_index):
        chunks = Retriever(sample_index).search([0.0, 1.0], max_context_bytes=1000)

        assert chunks[0].text == "no headings here"
        assert chunks[0].distance == 0.0
        assert chunks[0].document_path.endswith("B.json")
        assert [c.distance for c in chunks[1:]] == [2.0, 2.0]
        assert {c.text for c in chunks[1:]} == {"", " hello world"}

    def test_equal_distances_keep_index_order(self, sample_index):
        texts = Retriever(sample_index).retrieve([0.0, 1.0], max_context_bytes=1000)
        assert texts == ["no headings here", "", " hello world"]

    def test_results_are_in_non_decreasing_distance(self, corpus):
        rng = np.random.default_rng(1)
        retriever = Retriever(corpus)

        for _ in range(10):
            query = rng.random(3)
            chunks = retriever.search(query, max_context_bytes=10_000)
            scores = [c.distance for c in chunks]

            assert len(chunks) == corpus.size
            assert scores == sorted(scores)

    def test_distances_match_distance_function(self, corpus):
        query = [0.3, 0.6, 0.9]
        for score, position in Retriever(corpus).rank(query):
            assert score == pytest.approx(distance(corpus.embeddings[position].vector, query))

    @pytest.mark.parametrize("budget", [0, 1, 7, 20, 35, 60, 1000])
    def test_context_never_exceeds_budget(self, corpus, budget):
        texts = Retriever(corpus).retrieve([0.5, 0.5, 0.5], max_context_bytes=budget)
        assert sum(len(t.encode("utf-8")) for t in texts) <= budget

    def test_zero_budget_is_empty(self, sample_index):
        assert Retriever(sample_index).retrieve([0.0, 1.0], max_context_bytes=0) == []

    def test_oversized_first_chunk_yields_empty_context(self, sample_index):
        """The closest chunk alone exceeds the budget, so nothing is returned."""
        assert Retriever(sample_index).retrieve([0.0, 1.0], max_context_bytes=5) == []

    def test_packing_stops_at_first_overflow(self, sample_index):
        """Cutoff is strict: a later chunk that would fit is not tried."""
        # Ranked: "no headings here" (16 bytes), "" (0), " hello world" (12)
        texts = Retriever(sample_index).retrieve([0.0, 1.0], max_context_bytes=27)
        assert texts == ["no headings here", ""]

        texts = Retriever(sample_index).retrieve([1.0, 0.0], max_context_bytes=13)
        assert texts == ["", " hello world"]

    def test_budget_counts_bytes_not_characters(self, make_document):
        path = make_document("utf8.json", "héllo wörld")
        index = build_index([path], lambda texts: [[1.0]] * len(texts))

        assert Retriever(index).retrieve([1.0], max_context_bytes=11) == []
        assert Retriever(index).retrieve([1.0], max_context_bytes=13) == ["héllo wörld"]

    def test_empty_index_returns_empty_context(self):
        index = VectorIndex(documents=[], embeddings=[], chunk_refs=[])
        assert Retriever(index).retrieve([1.0, 2.0], max_context_bytes=100) == []

    def test_dimension_mismatch(self, sample_index):
        with pytest.raises(DimensionMismatchError):
            Retriever(sample_index).retrieve([1.0, 0.0, 0.0], max_context_bytes=100)

    def test_ranking_does_not_mutate_index(self, corpus):
        before = copy.deepcopy(corpus)
        retriever = Retriever(corpus)

        retriever.search([0.9, 0.1, 0.4], max_context_bytes=10_000)
        retriever.search([0.1, 0.9, 0.4], max_context_bytes=10_000)

        assert corpus == before

    def test_module_level_retrieve(self, sample_index):
        assert retrieve(sample_index, [0.0, 1.0], 15) == []
        assert retrieve(sample_index, [0.0, 1.0], 16) == ["no headings here", ""]


@pytest.mark.unit
class TestRetrieverFailures:
    """Tests for source document failures at query time."""

    def test_missing_document_fails_query(self, sample_index, sample_documents):
        import os

        os.remove(sample_documents[1])

        with pytest.raises(DocumentUnreadableError):
            Retriever(sample_index).retrieve([0.0, 1.0], max_context_bytes=1000)

    def test_missing_document_skipped_when_configured(self, sample_index, sample_documents):
        import os

        os.remove(sample_documents[1])
        texts = Retriever(sample_index, skip_unreadable=True).retrieve([0.0, 1.0], max_context_bytes=1000)

        assert texts == ["", " hello world"]

    def test_changed_document_is_stale(self, sample_index, sample_documents):
        from pathlib import Path
        import json

        Path(sample_documents[1]).write_text(json.dumps({"title": "B", "link": "", "html": "edited"}))

        with pytest.raises(StaleDocumentError):
            Retriever(sample_index).retrieve([0.0, 1.0], max_context_bytes=1000)

        texts = Retriever(sample_index, verify_fingerprints=False).retrieve([0.0, 1.0], max_context_bytes=1000)
        assert texts[0] == "edited"

    def test_chunk_number_beyond_document_is_stale(self, sample_index, sample_documents):
        from pathlib import Path
        import json

        Path(sample_documents[0]).write_text(json.dumps({"title": "A", "link": "", "html": "flattened"}))
        retriever = Retriever(sample_index, verify_fingerprints=False)

        with pytest.raises(StaleDocumentError):
            retriever.retrieve([1.0, 0.0], max_context_bytes=1000)

    def test_document_read_once_per_query(self, sample_index):
        from askdocs.retrieval.chunker import load_document

        calls = []

        def loader(path):
            calls.append(path)
            return load_document(path)

        Retriever(sample_index, document_loader=loader).retrieve([1.0, 0.0], max_context_bytes=1000)

        assert len(calls) == 2
