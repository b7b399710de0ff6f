"""
Model client package

Provides a unified async interface to each LLM provider.
"""

from best_of_n.infrastructure.model_clients.base import ModelClient
from best_of_n.infrastructure.model_clients.factory import create_client, resolve
from best_of_n.domain.value_objects import ModelResponse

__all__ = ["ModelClient", "ModelResponse", "create_client", "resolve"]
