"""LiteLLMClient — LLMClient implementation backed by litellm.acompletion."""

import litellm
import openai

from verdict_kit.llm.domain.client import Completion, CompletionOptions
from verdict_kit.llm.infrastructure.errors import LLMInvocationError
from verdict_kit.llm.infrastructure.retry import is_retryable_error

litellm.suppress_debug_info = True

# litellm re-raises provider failures as subclasses of the openai exception
# hierarchy, so these cover every backend it fronts.
_TRANSIENT_EXCEPTIONS: tuple[type[BaseException], ...] = (
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.InternalServerError,
    litellm.ServiceUnavailableError,
)


class LiteLLMClient:
    """Sends each prompt as a single user message to the configured model.

    Satisfies the LLMClient protocol structurally. One instance can be shared
    by every unit in a pipeline.
    """

    def __init__(self, model: str, timeout_seconds: float | None = None) -> None:
        self._model = model
        self._timeout_seconds = timeout_seconds

    def get_model(self) -> str:
        return self._model

    async def complete(self, prompt: str, options: CompletionOptions) -> str:
        completion = await self.complete_with_usage(prompt=prompt, options=options)
        return completion.text

    async def complete_with_usage(
        self, prompt: str, options: CompletionOptions
    ) -> Completion:
        """Invoke the model and return its text with reported token usage.

        Raises:
            LLMInvocationError: if the provider call fails or the response
                carries no text content.
        """
        kwargs: dict[str, object] = dict(options)
        if self._timeout_seconds is not None:
            kwargs["timeout"] = self._timeout_seconds

        try:
            response = await litellm.acompletion(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except Exception as exc:
            raise LLMInvocationError(
                model=self._model,
                reason=str(exc),
                retriable=_is_transient(exc),
            ) from exc

        content = response.choices[0].message.content
        if content is None:
            raise LLMInvocationError(model=self._model, reason="response has no content")

        usage = getattr(response, "usage", None)
        tokens_in = getattr(usage, "prompt_tokens", 0) or 0
        tokens_out = getattr(usage, "completion_tokens", 0) or 0
        return Completion(text=content, tokens_in=tokens_in, tokens_out=tokens_out)


def _is_transient(exc: Exception) -> bool:
    if isinstance(exc, _TRANSIENT_EXCEPTIONS):
        return True
    return is_retryable_error(exc)
