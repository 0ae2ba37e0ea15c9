"""
Vector Database Service - ChromaDB index over resume chunks

Holds one embedding per ResumeChunk so nearest-neighbour search and the
access-control filter run inside the store instead of in Python.

Collection layout:
    - name: resume_chunks
    - space: cosine (text-embedding-3 vectors are meant for cosine distance)
    - id: ResumeChunk.id
    - document: full chunk content
    - metadata: {"user_id", "domain", "role"}

Usage:
    index = get_vector_db()
    index.upsert(ids=[chunk.id], embeddings=[vector],
                 metadatas=[{"user_id": uid, "domain": "Fullstack", "role": "Lead"}],
                 documents=[chunk.content])
    hits = index.query(embedding=vector, n_results=7, where={"domain": "Fullstack"})
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import chromadb
from chromadb.config import Settings

from app.middleware.metrics import record_vector_query_latency

logger = logging.getLogger(__name__)

COLLECTION_NAME = "resume_chunks"


def chunk_metadata(user_id: str, domain: Optional[str], role: str) -> Dict[str, str]:
    """Chroma metadata values cannot be None; a missing domain is stored as ''."""
    return {"user_id": user_id, "domain": domain or "", "role": role}


class VectorDB:
    """
    ChromaDB-backed vector index for resume chunks.

    Attributes:
        client: ChromaDB persistent client
        collection: resume_chunks collection with HNSW cosine index
    """

    def __init__(self, persist_directory: str):
        self.persist_directory = persist_directory

        Path(persist_directory).mkdir(parents=True, exist_ok=True)

        self.client = chromadb.PersistentClient(
            path=persist_directory,
            settings=Settings(anonymized_telemetry=False)
        )

        self.collection = self.client.get_or_create_collection(
            name=COLLECTION_NAME,
            metadata={"hnsw:space": "cosine"}
        )

        logger.info(f"VectorDB initialized at {persist_directory}")

    def upsert(
        self,
        ids: List[str],
        embeddings: List[List[float]],
        metadatas: Optional[List[Dict[str, Any]]] = None,
        documents: Optional[List[str]] = None
    ) -> None:
        """Insert or update chunk embeddings."""
        if not ids:
            return

        start = time.perf_counter()
        try:
            self.collection.upsert(
                ids=ids,
                embeddings=embeddings,
                metadatas=metadatas,
                documents=documents
            )
            logger.debug(f"Upserted {len(ids)} embeddings")
        except Exception as e:
            logger.error(f"Error upserting embeddings: {e}")
            raise
        finally:
            record_vector_query_latency("upsert", time.perf_counter() - start)

    def query(
        self,
        embedding: List[float],
        n_results: int,
        where: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Nearest chunks to an embedding, ascending cosine distance.

        Args:
            embedding: Query vector
            n_results: Maximum hits to return
            where: Chroma metadata filter, None for no filter

        Returns:
            List of {"id", "distance", "document", "metadata"} dicts
        """
        start = time.perf_counter()
        try:
            results = self.collection.query(
                query_embeddings=[embedding],
                n_results=n_results,
                where=where,
                include=["documents", "metadatas", "distances"]
            )
        except Exception as e:
            logger.error(f"Error querying vector DB: {e}")
            raise
        finally:
            record_vector_query_latency("query", time.perf_counter() - start)

        hits = []
        if results["ids"] and results["ids"][0]:
            for i, chunk_id in enumerate(results["ids"][0]):
                hits.append({
                    "id": chunk_id,
                    "distance": results["distances"][0][i],
                    "document": results["documents"][0][i],
                    "metadata": results["metadatas"][0][i],
                })
        return hits

    def update_metadata(self, ids: List[str], metadatas: List[Dict[str, Any]]) -> None:
        """Update metadata (domain/role edits) for existing embeddings."""
        start = time.perf_counter()
        try:
            self.collection.update(ids=ids, metadatas=metadatas)
            logger.debug(f"Updated metadata for {len(ids)} embeddings")
        except Exception as e:
            logger.error(f"Error updating metadata: {e}")
            raise
        finally:
            record_vector_query_latency("update", time.perf_counter() - start)

    def delete(self, ids: List[str]) -> None:
        if not ids:
            return

        start = time.perf_counter()
        try:
            self.collection.delete(ids=ids)
            logger.debug(f"Deleted {len(ids)} embeddings")
        except Exception as e:
            logger.error(f"Error deleting embeddings: {e}")
            raise
        finally:
            record_vector_query_latency("delete", time.perf_counter() - start)


# ==================== Factory Function ====================

_vector_db_instance: Optional[VectorDB] = None


def get_vector_db(persist_directory: Optional[str] = None) -> VectorDB:
    """
    Get or create VectorDB singleton.

    Args:
        persist_directory: Optional path (uses settings if not provided)
    """
    global _vector_db_instance

    if _vector_db_instance is None:
        from app.config import get_settings

        path = persist_directory or get_settings().chroma_persist_directory
        _vector_db_instance = VectorDB(persist_directory=path)

    return _vector_db_instance

