"""Brief generation and follow-up Q&A against the upstream model."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import httpx

from briefgate.app.core.config import settings
from briefgate.app.core.logging import get_logger
from briefgate.app.exceptions import BriefValidationError, ParseProducedNoSections, UpstreamError
from briefgate.app.providers.base import BaseProvider, extract_message_content
from briefgate.app.services.brief_parser import BriefSection, parse_brief
from briefgate.app.services.brief_validator import find_missing_headings
from briefgate.app.services.prompts import FOLLOWUP_SYSTEM_PROMPT, build_exec_system_prompt

logger = get_logger(__name__)

NO_ANSWER = "No response generated"


@dataclass
class GeneratedBrief:
    text: str
    lens: str
    sections: List[BriefSection] = field(default_factory=list)


async def _complete(
    provider: BaseProvider,
    messages: List[Dict[str, str]],
    request_id: Optional[str] = None,
) -> Optional[str]:
    payload: Dict[str, Any] = {"model": settings.openrouter_model, "messages": messages}
    try:
        response = await provider.chat_completion(payload)
    except httpx.HTTPStatusError as e:
        logger.error(
            f"Upstream API error: {e.response.status_code}",
            extra={"request_id": request_id},
        )
        raise UpstreamError() from e
    except httpx.HTTPError as e:
        logger.error(f"Upstream request failed: {e}", extra={"request_id": request_id})
        raise UpstreamError() from e
    return extract_message_content(response)


async def generate_brief(
    provider: BaseProvider,
    content: str,
    lens: str,
    request_id: Optional[str] = None,
) -> GeneratedBrief:
    """Generate, validate and parse a decision brief.

    Raises:
        UpstreamError: Upstream call failed or returned no content
        BriefValidationError: Output lacks one or more required headings
        ParseProducedNoSections: Output has no parseable section
    """
    messages = [
        {"role": "system", "content": build_exec_system_prompt(lens)},
        {"role": "user", "content": content},
    ]
    text = await _complete(provider, messages, request_id)
    if not text:
        logger.error("Upstream returned no content", extra={"request_id": request_id})
        raise UpstreamError("No response from AI")

    missing = find_missing_headings(text)
    if missing:
        logger.warning(
            f"Brief missing {len(missing)} required headings",
            extra={"request_id": request_id, "missing": missing},
        )
        raise BriefValidationError(missing)

    sections = parse_brief(text)
    if not sections:
        raise ParseProducedNoSections()

    return GeneratedBrief(text=text, lens=lens, sections=sections)


def build_followup_messages(
    notes: str,
    summary: str,
    question: str,
    history: Iterable[Dict[str, str]] = (),
) -> List[Dict[str, str]]:
    """Conversation sent upstream for a follow-up question."""
    messages = [
        {"role": "system", "content": FOLLOWUP_SYSTEM_PROMPT},
        {"role": "user", "content": f"Here are the original notes:\n\n{notes}"},
        {
            "role": "assistant",
            "content": f"I've reviewed the notes. Here's the executive brief that was generated:\n\n{summary}",
        },
    ]
    messages.extend({"role": item["role"], "content": item["content"]} for item in history)
    messages.append({"role": "user", "content": question})
    return messages


async def answer_followup(
    provider: BaseProvider,
    notes: str,
    summary: str,
    question: str,
    history: Iterable[Dict[str, str]] = (),
    request_id: Optional[str] = None,
) -> str:
    """Answer a follow-up question about a generated brief.

    Raises:
        UpstreamError: Upstream call failed
    """
    messages = build_followup_messages(notes, summary, question, history)
    answer = await _complete(provider, messages, request_id)
    return answer or NO_ANSWER
