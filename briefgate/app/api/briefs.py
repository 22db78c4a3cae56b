"""Brief generation and follow-up endpoints."""

from typing import List, Literal

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, Field

from briefgate.app.core.config import settings
from briefgate.app.core.logging import get_logger
from briefgate.app.middleware.rate_limit import RateLimitDecision, enforce_rate_limit
from briefgate.app.middleware.request_id import get_request_id
from briefgate.app.providers.base import BaseProvider
from briefgate.app.providers.factory import get_provider
from briefgate.app.services.brief_service import answer_followup, generate_brief
from briefgate.app.services.prompts import Lens


class BriefRequest(BaseModel):
    """Source text to turn into a decision brief."""
    content: str = Field(..., min_length=1, max_length=settings.max_content_length)
    lens: Lens = "Product"


class BriefSectionOut(BaseModel):
    id: str
    title: str
    content: str
    icon: str
    color: str


class BriefResponse(BaseModel):
    brief: str
    lens: Lens
    sections: List[BriefSectionOut]


class QAItem(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1)


class FollowupRequest(BaseModel):
    """A question about a previously generated brief."""
    notes: str = Field(..., min_length=1, max_length=settings.max_notes_length)
    summary: str = Field(..., min_length=1, max_length=settings.max_notes_length)
    question: str = Field(..., min_length=1, max_length=settings.max_question_length)
    history: List[QAItem] = Field(default_factory=list)


class FollowupResponse(BaseModel):
    answer: str


router = APIRouter(prefix="/api")
logger = get_logger(__name__)


@router.post("/chat", response_model=BriefResponse)
async def create_brief(
    body: BriefRequest,
    request: Request,
    response: Response,
    rate_limit: RateLimitDecision = Depends(enforce_rate_limit("chat")),
    provider: BaseProvider = Depends(get_provider),
) -> BriefResponse:
    """Generate a decision brief from pasted text.

    Admission and quota checks run as dependencies before the body is used.
    """
    request_id = get_request_id(request)
    result = await generate_brief(provider, body.content, body.lens, request_id=request_id)

    response.headers.update(rate_limit.headers())
    logger.info(
        "Brief generated",
        extra={
            "request_id": request_id,
            "namespace": "chat",
            "lens": body.lens,
            "section_count": len(result.sections),
        },
    )
    return BriefResponse(
        brief=result.text,
        lens=body.lens,
        sections=[BriefSectionOut(**s.to_dict()) for s in result.sections],
    )


@router.post("/followup", response_model=FollowupResponse)
async def ask_followup(
    body: FollowupRequest,
    request: Request,
    response: Response,
    rate_limit: RateLimitDecision = Depends(enforce_rate_limit("followup")),
    provider: BaseProvider = Depends(get_provider),
) -> FollowupResponse:
    """Answer a follow-up question using the source notes and the brief."""
    answer = await answer_followup(
        provider,
        notes=body.notes,
        summary=body.summary,
        question=body.question,
        history=[item.model_dump() for item in body.history],
        request_id=get_request_id(request),
    )
    response.headers.update(rate_limit.headers())
    return FollowupResponse(answer=answer)
