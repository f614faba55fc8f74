"""Tests for the AI gateway client and the extraction invoker."""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from app.core.exceptions import (
    AIGatewayError,
    CreditsExhaustedError,
    ExtractionError,
    RateLimitExceededError,
)
from app.core.llm_client import AIGatewayClient
from app.prompts.system_prompts import CASE_EXTRACTION_SYSTEM_PROMPT
from app.schemas.extraction import ExtractionResult
from app.services.content_resolver import BinaryContent, NoContent, TextContent
from app.services.extraction_invoker import ExtractionInvoker


def _response(status_code: int, body=None) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = body or {}
    response.text = str(body)
    return response


def _event_args(event_date: str, **fields) -> dict:
    return {"date": event_date, "category": "Harassment", "description": "event", **fields}


class TestExtractionInvoker:

    @pytest.fixture
    def client(self) -> AIGatewayClient:
        return AIGatewayClient(
            api_key="test-gateway-key",
            url="https://gateway.test/v1/chat/completions",
            timeout=30,
        )

    @pytest.fixture
    def invoker(self, client) -> ExtractionInvoker:
        return ExtractionInvoker(client, model="test-model", max_document_chars=100)

    def test_text_request_shape(self, invoker):
        payload = invoker.build_request(TextContent("FIR lodged"), "FIR", "fir.txt")

        assert payload["model"] == "test-model"
        system, user = payload["messages"]
        assert system == {"role": "system", "content": CASE_EXTRACTION_SYSTEM_PROMPT}
        assert len(user["content"]) == 1
        assert user["content"][0]["type"] == "text"
        assert "FIR (fir.txt)" in user["content"][0]["text"]
        assert user["content"][0]["text"].endswith("FIR lodged")

    def test_tool_is_forced_with_six_required_arrays(self, invoker):
        payload = invoker.build_request(TextContent("x"))

        tool = payload["tools"][0]["function"]
        assert tool["name"] == "extract_intelligence"
        assert tool["parameters"]["required"] == [
            "events",
            "entities",
            "discrepancies",
            "claims",
            "complianceViolations",
            "financialHarm",
        ]
        for name in tool["parameters"]["required"]:
            assert tool["parameters"]["properties"][name]["type"] == "array"
        assert payload["tool_choice"] == {
            "type": "function",
            "function": {"name": "extract_intelligence"},
        }

    def test_multimodal_request_carries_data_uri(self, invoker):
        content = BinaryContent(data="JVBERi0xLjQ=", mime_type="application/pdf")

        payload = invoker.build_request(content, None, None)

        parts = payload["messages"][1]["content"]
        assert [part["type"] for part in parts] == ["text", "image_url"]
        assert "document (uploaded file)" in parts[0]["text"]
        assert parts[1]["image_url"]["url"] == "data:application/pdf;base64,JVBERi0xLjQ="

    def test_long_text_is_truncated_with_note(self, invoker):
        payload = invoker.build_request(TextContent("a" * 250))

        text = payload["messages"][1]["content"][0]["text"]
        assert "a" * 100 in text
        assert "a" * 101 not in text
        assert "truncated to the first 100 characters of 250" in text

    def test_text_at_ceiling_is_not_truncated(self, invoker):
        payload = invoker.build_request(TextContent("b" * 100))

        assert "truncated" not in payload["messages"][1]["content"][0]["text"]

    def test_no_content_cannot_be_sent(self, invoker):
        with pytest.raises(ExtractionError):
            invoker.build_request(NoContent("nothing"))

    @pytest.mark.asyncio
    async def test_extract_success(self, invoker, tool_call_response, sample_extraction_arguments):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.__aenter__.return_value = mock_client
            mock_client.__aexit__.return_value = None
            mock_client.post.return_value = _response(200, tool_call_response(sample_extraction_arguments))
            mock_client_class.return_value = mock_client

            result = await invoker.extract(TextContent("FIR text"), "FIR", "fir.txt")

        assert isinstance(result, ExtractionResult)
        assert result.counts() == {
            "events": 1,
            "entities": 1,
            "discrepancies": 1,
            "claims": 1,
            "compliance_violations": 1,
            "financial_harm": 1,
        }
        assert result.financial_harm[0].loss_amount == 1250000.0
        _, kwargs = mock_client.post.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer test-gateway-key"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, error_class, message",
        [
            (429, RateLimitExceededError, "Rate limit exceeded. Please try again later."),
            (402, CreditsExhaustedError, "AI credits exhausted. Please add credits to continue."),
            (500, AIGatewayError, "AI gateway error: 500"),
        ],
    )
    async def test_gateway_status_mapping(self, invoker, status_code, error_class, message):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.__aenter__.return_value = mock_client
            mock_client.__aexit__.return_value = None
            mock_client.post.return_value = _response(status_code, {"error": "nope"})
            mock_client_class.return_value = mock_client

            with pytest.raises(error_class) as exc_info:
                await invoker.extract(TextContent("FIR text"))

        assert exc_info.value.message == message
        assert exc_info.value.gateway_status == status_code
        # No retries
        assert mock_client.post.await_count == 1

    @pytest.mark.asyncio
    async def test_timeout_is_gateway_error(self, invoker):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.__aenter__.return_value = mock_client
            mock_client.__aexit__.return_value = None
            mock_client.post.side_effect = httpx.ReadTimeout("timed out")
            mock_client_class.return_value = mock_client

            with pytest.raises(AIGatewayError):
                await invoker.extract(TextContent("FIR text"))

    def test_missing_tool_call_is_extraction_error(self):
        body = {"choices": [{"message": {"role": "assistant", "content": "Here is a summary"}}]}

        with pytest.raises(ExtractionError) as exc_info:
            ExtractionInvoker.parse_response(body)

        assert exc_info.value.message == "No extraction results from AI"

    def test_unparsable_arguments_is_extraction_error(self, tool_call_response):
        with pytest.raises(ExtractionError):
            ExtractionInvoker.parse_response(tool_call_response("not json at all"))

    def test_fenced_arguments_are_parsed(self, tool_call_response):
        body = tool_call_response('```json\n{"events": [], "entities": [{"name": "FIA"}]}\n```')

        result = ExtractionInvoker.parse_response(body)

        assert result.entities[0].name == "FIA"
        assert result.claims == []

    def test_nulls_fall_back_to_defaults(self, tool_call_response):
        body = tool_call_response(
            {
                "events": [{"date": "2024-01-01", "category": None, "description": "x", "confidenceScore": "1.7"}],
                "claims": None,
            }
        )

        result = ExtractionInvoker.parse_response(body)

        assert result.events[0].category == "Legal Proceeding"
        assert result.events[0].confidence_score == 1.0
        assert result.claims == []

    def test_null_function_is_extraction_error(self):
        body = {"choices": [{"message": {"tool_calls": [{"type": "function", "function": None}]}}]}

        with pytest.raises(ExtractionError) as exc_info:
            ExtractionInvoker.parse_response(body)

        assert exc_info.value.message == "No extraction results from AI"

    def test_wrong_typed_fields_are_coerced(self, tool_call_response):
        body = tool_call_response(
            {
                "events": [
                    _event_args("2024-03-15", individuals=["Inspector A", "Constable B"]),
                    _event_args("2024-03-16"),
                    _event_args("2024-03-17", legalAction=302),
                ],
                "claims": [{"allegationText": "Murder", "legalSection": 302}],
                "complianceViolations": [
                    {"title": "No warrant", "remediationPossible": "unclear"},
                    {"title": "No witnesses", "remediationPossible": "yes"},
                ],
                "financialHarm": [{"title": "Account frozen", "isDocumented": 1, "currency": "Pakistani Rupees"}],
            }
        )

        result = ExtractionInvoker.parse_response(body)

        assert len(result.events) == 3
        assert result.events[0].individuals == "Inspector A, Constable B"
        assert result.events[2].legal_action == "302"
        assert result.claims[0].legal_section == "302"
        assert [v.remediation_possible for v in result.compliance_violations] == [False, True]
        assert result.financial_harm[0].is_documented is True
        assert result.financial_harm[0].currency == "Pakistani Rupees"

    def test_non_object_items_are_dropped(self, tool_call_response):
        body = tool_call_response(
            {
                "events": [_event_args("2024-03-15"), "see attached", 7],
                "entities": "none found",
            }
        )

        result = ExtractionInvoker.parse_response(body)

        assert len(result.events) == 1
        assert result.entities == []
