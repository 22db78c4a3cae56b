"""Tests for brief generation and follow-up answering."""

import httpx
import pytest

from briefgate.app.exceptions import BriefValidationError, ParseProducedNoSections, UpstreamError
from briefgate.app.providers.mock import MockProvider, build_sample_brief
from briefgate.app.services.brief_parser import SECTION_TITLES
from briefgate.app.services.brief_service import (
    NO_ANSWER,
    answer_followup,
    build_followup_messages,
    generate_brief,
)


class TestGenerateBrief:

    @pytest.mark.asyncio
    async def test_sample_brief_parsed_into_all_sections(self):
        provider = MockProvider()

        result = await generate_brief(provider, "Meeting notes", "Revenue")

        assert result.lens == "Revenue"
        assert result.text == build_sample_brief()
        assert [s.title for s in result.sections] == list(SECTION_TITLES)
        assert all(s.content.strip() for s in result.sections)

    @pytest.mark.asyncio
    async def test_prompt_carries_lens_and_content(self):
        provider = MockProvider()

        await generate_brief(provider, "Meeting notes", "Risk")

        messages = provider.calls[0]["messages"]
        assert messages[0]["role"] == "system"
        assert "Risk" in messages[0]["content"]
        assert messages[1] == {"role": "user", "content": "Meeting notes"}

    @pytest.mark.asyncio
    async def test_transport_failure_is_upstream_error(self):
        with pytest.raises(UpstreamError):
            await generate_brief(MockProvider(fail=True), "notes", "Product")

    @pytest.mark.asyncio
    async def test_http_status_error_is_upstream_error(self):
        class FailingProvider(MockProvider):
            async def chat_completion(self, payload):
                request = httpx.Request("POST", "http://mock.provider/chat/completions")
                response = httpx.Response(500, request=request)
                raise httpx.HTTPStatusError("boom", request=request, response=response)

        with pytest.raises(UpstreamError):
            await generate_brief(FailingProvider(), "notes", "Product")

    @pytest.mark.asyncio
    async def test_empty_reply_is_upstream_error(self):
        with pytest.raises(UpstreamError) as exc_info:
            await generate_brief(MockProvider(replies=[""]), "notes", "Product")
        assert exc_info.value.message == "No response from AI"

    @pytest.mark.asyncio
    async def test_missing_headings_rejected(self):
        reply = "DECISION BEING MADE\nShip it\n"

        with pytest.raises(BriefValidationError) as exc_info:
            await generate_brief(MockProvider(replies=[reply]), "notes", "Ops")

        assert "DECISION BEING MADE" not in exc_info.value.missing
        assert "NEXT 3 ACTIONS" in exc_info.value.missing

    @pytest.mark.asyncio
    async def test_all_headings_on_one_line(self):
        # Validation passes, but the one line is claimed by the first heading
        reply = "Summary: " + " / ".join(SECTION_TITLES)

        result = await generate_brief(MockProvider(replies=[reply]), "notes", "Ops")

        assert len(result.sections) == 1
        assert result.sections[0].content == ""

    @pytest.mark.asyncio
    async def test_no_sections_raises(self, monkeypatch):
        from briefgate.app.services import brief_service

        monkeypatch.setattr(brief_service, "parse_brief", lambda text: [])

        with pytest.raises(ParseProducedNoSections):
            await generate_brief(MockProvider(), "notes", "Product")


class TestFollowup:

    def test_message_layout(self):
        history = [
            {"role": "user", "content": "Who owns it?"},
            {"role": "assistant", "content": "Not stated in source."},
        ]

        messages = build_followup_messages("the notes", "the brief", "What next?", history)

        assert [m["role"] for m in messages] == [
            "system", "user", "assistant", "user", "assistant", "user",
        ]
        assert "the notes" in messages[1]["content"]
        assert "the brief" in messages[2]["content"]
        assert messages[3:5] == history
        assert messages[-1] == {"role": "user", "content": "What next?"}

    @pytest.mark.asyncio
    async def test_answer_returned(self):
        provider = MockProvider(replies=["Use option B."])

        answer = await answer_followup(provider, "notes", "brief", "Which option?")

        assert answer == "Use option B."

    @pytest.mark.asyncio
    async def test_empty_answer_gets_placeholder(self):
        answer = await answer_followup(MockProvider(replies=[None]), "notes", "brief", "Q?")
        assert answer == NO_ANSWER

    @pytest.mark.asyncio
    async def test_failure_is_upstream_error(self):
        with pytest.raises(UpstreamError):
            await answer_followup(MockProvider(fail=True), "notes", "brief", "Q?")
