"""Perplexity chat-completions client."""

from __future__ import annotations

import httpx
import structlog

from research_cache.common.errors import ConfigurationError, ProviderError
from research_cache.config import PerplexitySettings
from research_cache.core.cost.calculator import calculate_perplexity_cost
from research_cache.schemas.completion import ChatCompletionRequest, ChatCompletionResponse

logger = structlog.stdlib.get_logger()


class PerplexityClient:
    """
    Thin async wrapper around ``POST /chat/completions``.

    Every successful call is priced with the cost estimator; the estimate is
    logged and attached to the response as ``estimated_cost_usd``.
    """

    provider_name = "perplexity"

    def __init__(self, settings: PerplexitySettings, http_client: httpx.AsyncClient) -> None:
        if not settings.api_key:
            raise ConfigurationError("Perplexity API key is not set (PERPLEXITY_API_KEY).")
        self._settings = settings
        self.client = http_client

    @property
    def url(self) -> str:
        return f"{self._settings.api_base_url.rstrip('/')}/chat/completions"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        if request.stream:
            await logger.awarning("provider.perplexity.stream_disabled", model=request.model)
            request = request.model_copy(update={"stream": False})

        body = request.model_dump(mode="json", exclude_none=True)
        await logger.ainfo("provider.perplexity.request", model=request.model)

        try:
            response = await self.client.post(
                self.url,
                headers=self._headers(),
                json=body,
                timeout=self._settings.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            raise ProviderError(
                "Perplexity API request timed out.",
                details={"provider": self.provider_name, "status_code": 504, "retry": True},
            ) from e
        except httpx.TransportError as e:
            raise ProviderError(
                f"Perplexity API network error: {e}",
                details={"provider": self.provider_name, "status_code": 503, "retry": True},
            ) from e

        if response.status_code != 200:
            await self._handle_error_response(response)

        try:
            result = ChatCompletionResponse.model_validate(response.json())
        except ValueError as e:
            raise ProviderError(
                f"Perplexity API returned an unexpected payload: {e}",
                details={"provider": self.provider_name, "status_code": 502},
            ) from e

        tier = request.tier or self._settings.default_effort
        cost = calculate_perplexity_cost(result.model, result.usage, tier)
        if cost is not None:
            result.estimated_cost_usd = cost
            await logger.ainfo(
                "provider.perplexity.success",
                model=result.model,
                response_id=result.id,
                tier=str(tier),
                estimated_cost_usd=f"{cost:.6f}",
            )
        else:
            await logger.awarning("provider.perplexity.cost_unknown", model=result.model)

        return result

    async def _handle_error_response(self, response: httpx.Response) -> None:
        """Map non-200 responses to ProviderError."""
        status = response.status_code
        error_body = response.text
        await logger.aerror(
            "provider.perplexity.error",
            status_code=status,
            body=error_body[:500],
        )

        details: dict[str, object] = {"provider": self.provider_name, "status_code": status}
        if status == 401:
            raise ProviderError("Perplexity API authentication failed. Check API key.", details=details)
        if status == 403:
            raise ProviderError("Perplexity API access forbidden. Check permissions or plan.", details=details)
        if status == 429:
            raise ProviderError(
                "Perplexity API rate limit exceeded.", details={**details, "retry": True}
            )
        if 400 <= status < 500:
            raise ProviderError(
                f"Perplexity API client error ({status}): {error_body[:200]}", details=details
            )
        raise ProviderError(
            f"Perplexity API returned {status}: {error_body[:200]}",
            details={**details, "retry": status >= 500},
        )


def create_http_client(settings: PerplexitySettings) -> httpx.AsyncClient:
    """Create the shared async HTTP client; the caller owns and closes it."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds, connect=10.0),
        limits=httpx.Limits(max_connections=50, max_keepalive_connections=10),
        follow_redirects=True,
    )
