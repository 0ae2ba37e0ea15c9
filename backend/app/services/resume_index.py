"""
Resume Index - stores resume chunks and keeps the vector index in step

The relational row is written and flushed first, the vector is upserted
into Chroma, and only then is the transaction committed, so a failed index
write leaves no orphaned row behind.

Domain rules:
    - non-superadmin users with a configured domain always store and edit
      chunks under their own domain
    - everyone else stores under the domain they send (may be empty)

Generated resumes are written by the LLM from a role and a description and
then stored exactly like an upload.
"""

import asyncio
import logging
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ResumeChunk, User
from app.schemas.resume import ResumeCreate, ResumeGenerate, ResumeUpdate
from app.services.errors import ResumeNotFoundError
from app.services.llm_gateway import LLMError, LLMGateway
from app.services.resume_retriever import truncate_for_embedding
from app.services.vector_db import VectorDB, chunk_metadata

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "Manual Upload"
DESCRIPTION_SNIPPET_LENGTH = 100

RESUME_PROMPT = """You are an expert Resume Writer.
Create a professional, ATS-friendly resume for the role of "{role}"{domain_clause}.

Use the following description to tailor the resume:
"{description}"

Format the output in Markdown with these sections: Summary, Skills, Experience
(realistic entries based on the description) and Education.

IMPORTANT: Do NOT include personal contact placeholders such as "[YOUR NAME]",
"[Address]", "[Phone]" or "[Email]". Start directly with the "PROFESSIONAL SUMMARY"
section and do not add a preamble such as "Here is your resume".
"""


def effective_domain(user: User, requested: Optional[str]) -> Optional[str]:
    if user.domain and not user.is_super_admin:
        return user.domain
    return requested or None


class ResumeIndex:
    def __init__(
        self,
        session: AsyncSession,
        gateway: LLMGateway,
        vector_db: VectorDB,
        input_limit: int = 9000,
    ):
        self.session = session
        self.gateway = gateway
        self.vector_db = vector_db
        self.input_limit = input_limit

    async def create(self, user: User, data: ResumeCreate) -> ResumeChunk:
        embedding = await self.gateway.generate_embedding(
            truncate_for_embedding(data.content, self.input_limit)
        )
        chunk = ResumeChunk(
            user_id=user.id,
            domain=effective_domain(user, data.domain),
            role=data.role or DEFAULT_ROLE,
            description=data.description or "",
            content=data.content,
            embedding=embedding,
            chunk_metadata=data.metadata,
        )
        self.session.add(chunk)
        await self.session.flush()

        try:
            await asyncio.to_thread(
                self.vector_db.upsert,
                [chunk.id],
                [embedding],
                [chunk_metadata(user.id, chunk.domain, chunk.role)],
                [chunk.content],
            )
        except Exception:
            await self.session.rollback()
            raise

        await self.session.commit()
        await self.session.refresh(chunk)
        logger.info(f"Indexed resume chunk {chunk.id} (domain={chunk.domain})")
        return chunk

    async def generate(self, user: User, data: ResumeGenerate) -> ResumeChunk:
        """
        Write a resume with the LLM and index it under the effective domain.

        Raises:
            LLMError: generation or embedding failed; nothing is stored
        """
        domain = effective_domain(user, data.domain)
        prompt = RESUME_PROMPT.format(
            role=data.role,
            domain_clause=f' in the domain of "{domain}"' if domain else "",
            description=data.description,
        )
        content = (await self.gateway.generate_content(prompt)).strip()
        if not content:
            raise LLMError("Resume generation returned only whitespace")
        logger.info(f"Generated resume for user {user.id} (role={data.role}, {len(content)} chars)")

        return await self.create(user, ResumeCreate(
            content=content,
            domain=domain,
            role=data.role,
            description=data.description[:DESCRIPTION_SNIPPET_LENGTH],
            metadata={"type": "generated"},
        ))

    async def list_visible(self, user: User) -> List[ResumeChunk]:
        """The caller's own chunks plus every chunk in the caller's domain."""
        condition = ResumeChunk.user_id == user.id
        if user.domain:
            condition = or_(condition, ResumeChunk.domain == user.domain)
        result = await self.session.execute(
            select(ResumeChunk).where(condition).order_by(ResumeChunk.created_at.desc())
        )
        return list(result.scalars().all())

    async def _get_editable(self, chunk_id: str, user: User) -> ResumeChunk:
        result = await self.session.execute(select(ResumeChunk).where(ResumeChunk.id == chunk_id))
        chunk = result.scalar_one_or_none()
        if chunk is None or (chunk.user_id != user.id and not user.is_super_admin):
            raise ResumeNotFoundError(chunk_id)
        return chunk

    async def update(self, chunk_id: str, user: User, data: ResumeUpdate) -> ResumeChunk:
        chunk = await self._get_editable(chunk_id, user)

        update_data = data.model_dump(exclude_unset=True)
        if "domain" in update_data:
            chunk.domain = effective_domain(user, update_data["domain"])
        if update_data.get("role"):
            chunk.role = update_data["role"]

        await self.session.flush()
        await asyncio.to_thread(
            self.vector_db.update_metadata,
            [chunk.id],
            [chunk_metadata(chunk.user_id, chunk.domain, chunk.role)],
        )
        await self.session.commit()
        await self.session.refresh(chunk)
        return chunk

    async def delete(self, chunk_id: str, user: User) -> None:
        chunk = await self._get_editable(chunk_id, user)
        await self.session.delete(chunk)
        await self.session.flush()
        await asyncio.to_thread(self.vector_db.delete, [chunk_id])
        await self.session.commit()
        logger.info(f"Deleted resume chunk {chunk_id}")
