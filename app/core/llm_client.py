from typing import Any, Dict, Optional

import httpx
from httpx import TimeoutException

from app.core.exceptions import AIGatewayError, CreditsExhaustedError, RateLimitExceededError
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
CREDITS_EXHAUSTED_MESSAGE = "AI credits exhausted. Please add credits to continue."


class AIGatewayClient:
    """Client for an OpenAI-compatible chat-completions gateway.

    Makes exactly one attempt per call. Capacity errors (429, 402) are raised
    as their own exception types so callers can surface them unchanged.
    """

    def __init__(self, api_key: str, url: str, timeout: int = 300):
        """Initialize the gateway client.

        Args:
            api_key: Bearer key for the gateway
            url: Full chat-completions URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.url = url
        self.timeout = timeout
        self.logger = LOGGER

    async def chat_completion(
        self,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST a chat-completion request and return the decoded body.

        Args:
            payload: Request body (model, messages, tools, tool_choice)
            headers: Additional headers

        Returns:
            Parsed JSON response

        Raises:
            RateLimitExceededError: Gateway answered 429
            CreditsExhaustedError: Gateway answered 402
            AIGatewayError: Any other non-2xx answer, timeout or transport failure
        """
        default_headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if headers:
            default_headers.update(headers)

        self.logger.debug(
            f"Calling AI gateway: {self.url}",
            extra={"model": payload.get("model"), "timeout": self.timeout},
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, headers=default_headers, json=payload)
        except TimeoutException as e:
            self.logger.error("AI gateway timeout", extra={"url": self.url})
            raise AIGatewayError("AI gateway request timed out", original_error=e) from e
        except httpx.HTTPError as e:
            self.logger.error(f"AI gateway transport error: {e}", extra={"url": self.url})
            raise AIGatewayError(f"AI gateway error: {e}", original_error=e) from e

        if response.status_code < 200 or response.status_code >= 300:
            self._raise_for_status(response)

        return response.json()

    def _raise_for_status(self, response: httpx.Response) -> None:
        status_code = response.status_code
        try:
            error_body = response.text
        except Exception:
            error_body = "Could not read response body"

        self.logger.error(
            "AI gateway error",
            extra={"url": self.url, "status_code": status_code, "error_body": error_body[:500]},
        )

        if status_code == 429:
            raise RateLimitExceededError(RATE_LIMIT_MESSAGE, gateway_status=status_code)
        if status_code == 402:
            raise CreditsExhaustedError(CREDITS_EXHAUSTED_MESSAGE, gateway_status=status_code)
        raise AIGatewayError(f"AI gateway error: {status_code}", gateway_status=status_code)
