"""Async client for the Together AI images API with Pydantic models"""
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from ai.exceptions.together_exceptions import (
    APIError,
    InvalidResponseError,
    MissingAPIKeyError,
)
from ai.models.image_models import ImageGenerationResponse
from config import TOGETHER_API_KEY, TOGETHER_API_URL, TOGETHER_TIMEOUT
from utils.logging_config import get_logger

logger = get_logger(__name__)


class AsyncTogetherClient:
    """
    Thin wrapper around POST /v1/images/generations.

    One request per call, no retries. Any transport or HTTP failure is raised
    as APIError so the caller can turn it into a single error response.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = TOGETHER_API_URL,
        timeout: float = TOGETHER_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else TOGETHER_API_KEY
        if not self.api_key:
            raise MissingAPIKeyError("TOGETHER_API_KEY environment variable is required")
        self.api_url = api_url

        # HTTP client
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def create_images(
        self,
        model: str,
        prompt: str,
        width: int,
        height: int,
        steps: int,
        n: int,
    ) -> ImageGenerationResponse:
        """Request n images and return them base64-encoded"""
        payload: Dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "width": width,
            "height": height,
            "steps": steps,
            "n": n,
            "response_format": "base64",
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        logger.debug(f"📤 Sending image request to {self.api_url}")
        logger.debug(f"📤 Model: {model}, size: {width}x{height}, steps: {steps}, n: {n}")

        try:
            response = await self._client.post(self.api_url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            raise APIError(f"Together AI request timed out: {e}") from e
        except httpx.RequestError as e:
            raise APIError(f"Together AI request failed: {e}") from e

        if response.status_code != 200:
            raise APIError(
                f"Together AI request failed with status {response.status_code}: {self._error_detail(response)}",
                status_code=response.status_code,
            )

        try:
            result = ImageGenerationResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise InvalidResponseError(f"Unexpected response from Together AI: {e}") from e

        logger.debug(f"📥 Received {len(result.data)} image(s) from Together AI")
        return result

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Pull the API's error message out of the body, falling back to raw text"""
        try:
            body = response.json()
        except ValueError:
            return response.text
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str):
            return error
        return response.text
