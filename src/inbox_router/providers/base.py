"""Provider-agnostic model handle contract.

The routing core only needs "send a system and user prompt, get text back".
Concrete providers implement ModelHandle; the router receives a ModelFactory
that turns a model ID into a handle.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """A single text-generation request."""

    system_prompt: str
    user_prompt: str
    temperature: float | None = None
    max_output_tokens: int | None = None


@dataclass(frozen=True, slots=True)
class GenerationResponse:
    """Text returned by a model, with optional token usage."""

    text: str
    model_id: str
    input_tokens: int | None = None
    output_tokens: int | None = None


class ModelHandle(ABC):
    """A model bound to one identifier, ready to generate text."""

    def __init__(self, model_id: str):
        self.model_id = model_id

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Run one generation request.

        Raises:
            ModelInvocationError: If the provider call fails
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model_id={self.model_id!r})"


ModelFactory = Callable[[str], ModelHandle]
