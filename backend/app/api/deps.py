"""
Shared router dependencies

Services are built per request from the process-wide gateway and vector
index singletons; tests override get_gateway / get_vector_index.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import get_db
from app.services.job_store import JobStore
from app.services.llm_gateway import LLMGateway, get_llm_gateway
from app.services.resume_retriever import ResumeRetriever
from app.services.vector_db import VectorDB, get_vector_db


def get_gateway() -> LLMGateway:
    return get_llm_gateway()


def get_vector_index() -> VectorDB:
    return get_vector_db()


def get_job_store(db: AsyncSession = Depends(get_db)) -> JobStore:
    return JobStore(db)


def get_retriever(
    gateway: LLMGateway = Depends(get_gateway),
    vector_db: VectorDB = Depends(get_vector_index),
) -> ResumeRetriever:
    settings = get_settings()
    return ResumeRetriever(
        gateway,
        vector_db,
        top_k=settings.retrieval_top_k,
        input_limit=settings.embedding_input_limit,
    )
