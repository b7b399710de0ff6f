"""
Google Gemini (Google GenAI SDK) model client
"""

import os
import time

from google import genai
from google.genai.types import GenerateContentConfig, HttpOptions

from best_of_n.domain.constants import DEFAULT_MAX_TOKENS
from best_of_n.domain.value_objects import ModelResponse
from best_of_n.infrastructure.model_clients.base import ModelClient


class GeminiClient(ModelClient):
    """Model client using the Google GenAI SDK (Gemini API key or Vertex AI)"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        project_id: str | None = None,
        location: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout_seconds: float | None = None,
    ):
        """
        Args:
            model_name: Model name (e.g. gemini-3-flash-preview)
            api_key: Gemini API key (falls back to GOOGLE_API_KEY / GEMINI_API_KEY)
            project_id: GCP project ID, used with Vertex AI when no API key is available
                (falls back to GCP_PROJECT_ID)
            location: Vertex AI region (default: global)
            max_tokens: Default output token limit
            timeout_seconds: HTTP timeout (SDK default if not specified)
        """
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY") or os.environ.get("GEMINI_API_KEY")
        self.project_id = project_id or os.environ.get("GCP_PROJECT_ID")
        self.location = location or os.environ.get("GCP_LOCATION", "global")

        # Timeout is configured via HttpOptions (milliseconds)
        http_options = None
        if timeout_seconds is not None:
            http_options = HttpOptions(timeout=int(timeout_seconds * 1000))

        if self.api_key:
            self.client = genai.Client(api_key=self.api_key, http_options=http_options)
        elif self.project_id:
            self.client = genai.Client(
                vertexai=True,
                project=self.project_id,
                location=self.location,
                http_options=http_options,
            )
        else:
            raise ValueError("GOOGLE_API_KEY (or GCP_PROJECT_ID for Vertex AI) is not set")

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ModelResponse:
        """Send a prompt and retrieve the response"""
        generation_config = GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens or self.max_tokens,
        )

        start_time = time.time()
        response = await self.client.aio.models.generate_content(
            model=self.model_name,
            contents=prompt,
            config=generation_config,
        )
        end_time = time.time()

        latency_ms = int((end_time - start_time) * 1000)

        # Retrieve token usage
        input_tokens = 0
        output_tokens = 0
        if hasattr(response, "usage_metadata") and response.usage_metadata:
            input_tokens = getattr(response.usage_metadata, "prompt_token_count", 0) or 0
            output_tokens = getattr(response.usage_metadata, "candidates_token_count", 0) or 0

        return ModelResponse(
            output=(response.text or "").strip(),
            latency_ms=latency_ms,
            model_name=self.model_name,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
