import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_gateway, get_retriever
from app.auth import get_current_user
from app.database import get_db
from app.models import User
from app.schemas import ChatRequest, HistoryResponse
from app.services.llm_gateway import LLMError, LLMGateway
from app.services.quick_proposal import QuickProposalService
from app.services.resume_retriever import ResumeRetriever

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=HistoryResponse)
async def quick_proposal(
    request: ChatRequest,
    db: AsyncSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_gateway),
    retriever: ResumeRetriever = Depends(get_retriever),
    user: User = Depends(get_current_user),
):
    service = QuickProposalService(db, gateway, retriever)
    try:
        entry = await service.ask(user, request.question)
    except LLMError as e:
        logger.error(f"Quick proposal failed for user {user.id}: {e}")
        raise HTTPException(status_code=502, detail="Proposal generation failed, please retry")
    return HistoryResponse.model_validate(entry)
