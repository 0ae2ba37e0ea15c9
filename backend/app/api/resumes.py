from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_gateway, get_vector_index
from app.auth import get_current_user
from app.config import get_settings
from app.database import get_db
from app.models import User
from app.schemas import ResumeCreate, ResumeGenerate, ResumeResponse, ResumeUpdate
from app.services.errors import ResumeNotFoundError
from app.services.llm_gateway import LLMError, LLMGateway
from app.services.resume_index import ResumeIndex
from app.services.vector_db import VectorDB

router = APIRouter()


def get_resume_index(
    db: AsyncSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_gateway),
    vector_db: VectorDB = Depends(get_vector_index),
) -> ResumeIndex:
    return ResumeIndex(db, gateway, vector_db, input_limit=get_settings().embedding_input_limit)


@router.post("", response_model=ResumeResponse, status_code=status.HTTP_201_CREATED)
async def create_resume(
    data: ResumeCreate,
    index: ResumeIndex = Depends(get_resume_index),
    user: User = Depends(get_current_user),
):
    try:
        chunk = await index.create(user, data)
    except LLMError:
        raise HTTPException(status_code=502, detail="Embedding generation failed, please retry")
    return ResumeResponse.model_validate(chunk)


@router.post("/generate", response_model=ResumeResponse, status_code=status.HTTP_201_CREATED)
async def generate_resume(
    data: ResumeGenerate,
    index: ResumeIndex = Depends(get_resume_index),
    user: User = Depends(get_current_user),
):
    try:
        chunk = await index.generate(user, data)
    except LLMError:
        raise HTTPException(status_code=502, detail="Resume generation failed, please retry")
    return ResumeResponse.model_validate(chunk)


@router.get("", response_model=List[ResumeResponse])
async def list_resumes(
    index: ResumeIndex = Depends(get_resume_index),
    user: User = Depends(get_current_user),
):
    chunks = await index.list_visible(user)
    return [ResumeResponse.model_validate(chunk) for chunk in chunks]


@router.patch("/{resume_id}", response_model=ResumeResponse)
async def update_resume(
    resume_id: str,
    update: ResumeUpdate,
    index: ResumeIndex = Depends(get_resume_index),
    user: User = Depends(get_current_user),
):
    try:
        chunk = await index.update(resume_id, user, update)
    except ResumeNotFoundError:
        raise HTTPException(status_code=404, detail="Resume not found")
    return ResumeResponse.model_validate(chunk)


@router.delete("/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resume(
    resume_id: str,
    index: ResumeIndex = Depends(get_resume_index),
    user: User = Depends(get_current_user),
):
    try:
        await index.delete(resume_id, user)
    except ResumeNotFoundError:
        raise HTTPException(status_code=404, detail="Resume not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
