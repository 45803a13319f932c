"""LLMClient port — the text-completion capability shared by model-backed units."""

from typing import Protocol, TypedDict

from pydantic import BaseModel, Field


class ResponseFormat(TypedDict):
    type: str


class CompletionOptions(TypedDict, total=False):
    """Generation options understood by every LLMClient."""

    temperature: float
    max_tokens: int
    response_format: ResponseFormat


JSON_OBJECT_FORMAT: ResponseFormat = {"type": "json_object"}


class Completion(BaseModel, frozen=True):
    """Completion text plus the token usage the provider reported for it."""

    text: str
    tokens_in: int = Field(default=0, ge=0)
    tokens_out: int = Field(default=0, ge=0)


class LLMClient(Protocol):
    """Structural interface for an async text-completion backend.

    Instances are shared read-only between units; any concurrency limits
    inside the backend are the implementation's concern.
    """

    async def complete(self, prompt: str, options: CompletionOptions) -> str: ...

    async def complete_with_usage(
        self, prompt: str, options: CompletionOptions
    ) -> Completion: ...

    def get_model(self) -> str: ...
