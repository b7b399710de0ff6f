"""
Model client base class

Defines the abstract base class inherited by all model clients.
Retries are left to the provider SDKs (their ``max_retries`` setting).
"""

from abc import ABC, abstractmethod

from best_of_n.domain.value_objects import ModelResponse


class ModelClient(ABC):
    """Abstract base class for async model clients"""

    model_name: str

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        Args:
            prompt: Input prompt
            temperature: Sampling temperature (backends may ignore it, e.g. reasoning models)
            max_tokens: Output token limit (client default if omitted)
        """
        pass

    async def close(self) -> None:
        """Release the client's HTTP connection pool (no-op by default)"""
        pass
