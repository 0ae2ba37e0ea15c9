"""
Resume Retriever - nearest resume chunks for a job or question

Embeds the query text (truncated to the embedding input limit; the full
text is still used for generation) and runs a cosine nearest-neighbour
query in the vector index, scoped by an access predicate:

    - SUPER_ADMIN: every chunk
    - user with a configured domain: chunks in that domain
    - unscoped user: only their own chunks

Results are ordered by ascending distance. Nothing is mutated.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.models.user import UserRole
from app.services.llm_gateway import LLMGateway
from app.services.vector_db import VectorDB

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetrievedChunk:
    id: str
    content: str
    distance: float
    domain: Optional[str] = None
    role: Optional[str] = None


def truncate_for_embedding(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]


def build_access_filter(
    user_id: str,
    user_domain: Optional[str],
    role: Optional[str],
) -> Optional[Dict[str, Any]]:
    """Chroma `where` clause for the chunks a user may retrieve."""
    if role == UserRole.SUPER_ADMIN.value:
        return None
    if user_domain:
        return {"domain": user_domain}
    return {"user_id": user_id}


class ResumeRetriever:
    def __init__(
        self,
        gateway: LLMGateway,
        vector_db: VectorDB,
        top_k: int = 7,
        input_limit: int = 9000,
    ):
        self.gateway = gateway
        self.vector_db = vector_db
        self.top_k = top_k
        self.input_limit = input_limit

    async def retrieve(
        self,
        query_text: str,
        user_id: str,
        user_domain: Optional[str] = None,
        role: Optional[str] = None,
    ) -> List[RetrievedChunk]:
        embedding = await self.gateway.generate_embedding(
            truncate_for_embedding(query_text, self.input_limit)
        )
        where = build_access_filter(user_id, user_domain, role)

        # Chroma's client is synchronous
        hits = await asyncio.to_thread(self.vector_db.query, embedding, self.top_k, where)

        chunks = [
            RetrievedChunk(
                id=hit["id"],
                content=hit["document"] or "",
                distance=hit["distance"],
                domain=(hit.get("metadata") or {}).get("domain") or None,
                role=(hit.get("metadata") or {}).get("role"),
            )
            for hit in hits
        ]
        chunks.sort(key=lambda c: c.distance)
        logger.debug(f"Retrieved {len(chunks)} resume chunks (filter={where})")
        return chunks
