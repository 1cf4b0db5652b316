from http import HTTPStatus

import httpx

from src.exceptions import GenerationFailed, UpstreamPaymentRequired, UpstreamRateLimited
from src.interfaces.agent import AutonomyMode, ConversationContext, DomainMatch
from src.interfaces.credits import CreditAction
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


class GenerationClient:
    """Client of the language-generation service, only called once the credit gate admitted the exchange."""

    def __init__(self, base_url: str, api_key: str | None, timeout: float, client: httpx.AsyncClient | None = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout=timeout))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def generate(
        self,
        message: str,
        matches: list[DomainMatch],
        context: ConversationContext,
        mode: AutonomyMode,
        action: CreditAction,
    ) -> str:
        """
        Ask the generation service for a reply.

        Raises:
            UpstreamRateLimited: On a 429 answer
            UpstreamPaymentRequired: On a 402 answer
            GenerationFailed: On any other error, never retried here
        """
        headers = {"authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        payload = {
            "message": message,
            "action": action.value,
            "mode": mode.value,
            "domains": [match.model_dump(mode="json") for match in matches],
            "context": context.model_dump(mode="json"),
        }

        try:
            response = await self.client.post(f"{self.base_url}/v1/generate", json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Error calling the generation service: {e}")
            raise GenerationFailed(str(e)) from e

        if response.status_code == HTTPStatus.TOO_MANY_REQUESTS:
            logger.warning("Generation service is rate limiting us")
            raise UpstreamRateLimited(response.text)
        if response.status_code == HTTPStatus.PAYMENT_REQUIRED:
            logger.warning("Generation service requires payment")
            raise UpstreamPaymentRequired(response.text)
        if response.status_code >= 400:
            logger.error(f"Generation service error: {response.status_code} - {response.text}")
            raise GenerationFailed(f"Generation service answered {response.status_code}")

        try:
            return response.json()["reply"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed generation service response: {response.text}")
            raise GenerationFailed("Malformed generation service response") from e
