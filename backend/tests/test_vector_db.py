"""
Tests for the ChromaDB resume index

Uses a real persistent client in a temporary directory.
"""

import pytest

from app.services.vector_db import COLLECTION_NAME, VectorDB, chunk_metadata


@pytest.fixture
def index(tmp_path):
    return VectorDB(persist_directory=str(tmp_path / "chroma"))


@pytest.fixture
def populated(index):
    index.upsert(
        ids=["react", "node", "rag"],
        embeddings=[[1.0, 0.0, 0.0], [0.8, 0.6, 0.0], [0.0, 0.0, 1.0]],
        metadatas=[
            chunk_metadata("user-1", "Fullstack", "Frontend Lead"),
            chunk_metadata("user-2", "Fullstack", "Backend Engineer"),
            chunk_metadata("user-1", "GenAI", "ML Engineer"),
        ],
        documents=["React dashboards", "Node APIs", "RAG pipelines"],
    )
    return index


class TestVectorDB:
    """Test upsert, filtered query and maintenance operations."""

    def test_collection_name(self, index):
        assert index.collection.name == COLLECTION_NAME

    def test_query_orders_by_distance(self, populated):
        hits = populated.query([1.0, 0.0, 0.0], n_results=3)

        assert [h["id"] for h in hits] == ["react", "node", "rag"]
        distances = [h["distance"] for h in hits]
        assert distances == sorted(distances)
        assert hits[0]["document"] == "React dashboards"

    def test_domain_filter(self, populated):
        hits = populated.query([0.0, 0.0, 1.0], n_results=3, where={"domain": "Fullstack"})

        assert {h["id"] for h in hits} == {"react", "node"}

    def test_user_filter(self, populated):
        hits = populated.query([1.0, 0.0, 0.0], n_results=3, where={"user_id": "user-2"})

        assert [h["id"] for h in hits] == ["node"]

    def test_update_metadata(self, populated):
        populated.update_metadata(["rag"], [chunk_metadata("user-1", "AI_ML", "ML Engineer")])

        hits = populated.query([0.0, 0.0, 1.0], n_results=3, where={"domain": "AI_ML"})
        assert [h["id"] for h in hits] == ["rag"]

    def test_delete(self, populated):
        populated.delete(["node"])

        assert populated.collection.count() == 2

    def test_empty_upsert_is_noop(self, index):
        index.upsert(ids=[], embeddings=[])
        assert index.collection.count() == 0

    def test_missing_domain_stored_as_empty_string(self):
        assert chunk_metadata("user-1", None, "Manual Upload")["domain"] == ""
