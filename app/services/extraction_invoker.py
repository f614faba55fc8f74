from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ExtractionError
from app.core.llm_client import AIGatewayClient
from app.prompts.system_prompts import (
    CASE_EXTRACTION_SYSTEM_PROMPT,
    EXTRACTION_TOOL_NAME,
    TRUNCATION_NOTE,
    USER_PROMPT_TEMPLATE,
    build_extraction_tool,
    forced_tool_choice,
)
from app.schemas.extraction import ExtractionResult
from app.services.content_resolver import BinaryContent, ResolvedContent, TextContent
from app.utils.json_parser import parse_json_safely
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

NO_RESULTS_MESSAGE = "No extraction results from AI"


class ExtractionInvoker:
    """Runs the single forced ``extract_intelligence`` call for one document.

    Attributes:
        client: Gateway client used for the call
        model: Model identifier sent with every request
        max_document_chars: Text-path ceiling; longer text is truncated
    """

    def __init__(self, client: AIGatewayClient, model: str, max_document_chars: int = 500_000):
        self.client = client
        self.model = model
        self.max_document_chars = max_document_chars

    def _user_content(
        self,
        content: ResolvedContent,
        document_type: Optional[str],
        file_name: Optional[str],
    ) -> List[Dict[str, Any]]:
        instruction = USER_PROMPT_TEMPLATE.format(
            document_type=document_type or "document",
            file_name=file_name or "uploaded file",
        )

        if isinstance(content, BinaryContent):
            return [
                {"type": "text", "text": f"{instruction} from the attached file."},
                {"type": "image_url", "image_url": {"url": content.data_uri}},
            ]

        if isinstance(content, TextContent):
            text = content.text
            total = len(text)
            if total > self.max_document_chars:
                LOGGER.warning(
                    "Document text truncated",
                    extra={"original_chars": total, "limit": self.max_document_chars},
                )
                text = text[: self.max_document_chars] + TRUNCATION_NOTE.format(
                    limit=self.max_document_chars, total=total
                )
            return [{"type": "text", "text": f"{instruction}:\n\n{text}"}]

        raise ExtractionError("Nothing to extract from: content was not resolved")

    def build_request(
        self,
        content: ResolvedContent,
        document_type: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Build the chat-completion body with the tool call pinned."""
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": CASE_EXTRACTION_SYSTEM_PROMPT},
                {"role": "user", "content": self._user_content(content, document_type, file_name)},
            ],
            "tools": [build_extraction_tool()],
            "tool_choice": forced_tool_choice(),
        }

    async def extract(
        self,
        content: ResolvedContent,
        document_type: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> ExtractionResult:
        """Call the gateway and return the typed tool-call arguments.

        Raises:
            RateLimitExceededError: Gateway answered 429
            CreditsExhaustedError: Gateway answered 402
            AIGatewayError: Gateway answered any other error status
            ExtractionError: 2xx answer without usable tool-call arguments
        """
        payload = self.build_request(content, document_type, file_name)
        LOGGER.info(
            "Requesting extraction",
            extra={
                "file_name": file_name,
                "multimodal": isinstance(content, BinaryContent),
                "model": self.model,
            },
        )
        response = await self.client.chat_completion(payload)
        return self.parse_response(response)

    @staticmethod
    def parse_response(response: Dict[str, Any]) -> ExtractionResult:
        """Pull ``extract_intelligence`` arguments out of a completion body."""
        try:
            tool_call = response["choices"][0]["message"]["tool_calls"][0]
            function = tool_call["function"]
        except (KeyError, IndexError, TypeError):
            LOGGER.error("AI response contained no tool call")
            raise ExtractionError(NO_RESULTS_MESSAGE)

        if not isinstance(function, dict):
            LOGGER.error("AI tool call carried no function payload")
            raise ExtractionError(NO_RESULTS_MESSAGE)

        if function.get("name") not in (None, EXTRACTION_TOOL_NAME):
            LOGGER.warning(f"Unexpected tool call name: {function.get('name')}")

        arguments = parse_json_safely(function.get("arguments"))
        if arguments is None:
            raise ExtractionError(NO_RESULTS_MESSAGE)

        try:
            result = ExtractionResult.model_validate(arguments)
        except PydanticValidationError as e:
            LOGGER.error(f"Tool-call arguments failed validation: {e}")
            raise ExtractionError(NO_RESULTS_MESSAGE, original_error=e)

        LOGGER.info("Extraction parsed", extra={"counts": result.counts()})
        return result
