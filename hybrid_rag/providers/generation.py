"""Text generation over the OpenAI chat completions API (or any compatible server)."""
from __future__ import annotations

import logging
import re
from typing import Iterator

from hybrid_rag.errors import GenerationError, retry_call
from .base import GenerationProvider, GenerationStream

logger = logging.getLogger(__name__)

EMPTY_ANSWER = "I couldn't generate an answer."
_ANSWER_PREFIX = re.compile(r"^(?:Answer:|Response:)\s*", re.I)


def build_user_prompt(context: str, question: str) -> str:
    return f"{context}\n\n{question}" if context else question


def clean_answer(text: str) -> str:
    """Strip echoed 'Answer:' / 'Response:' prefixes; fall back to a fixed message when empty."""
    answer = _ANSWER_PREFIX.sub("", (text or "").strip()).strip()
    return answer or EMPTY_ANSWER


def _wrap(e: Exception, what: str) -> GenerationError:
    import openai
    retryable = isinstance(
        e, (openai.APITimeoutError, openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError)
    )
    return GenerationError(f"Failed to {what}: {e}", e, retryable=retryable)


class OpenAIGenerator(GenerationProvider):
    """Chat completions with retry on transient failures. Streaming yields content deltas."""

    def __init__(
        self,
        model_name: str = "gpt-4o-mini",
        api_key: str | None = None,
        base_url: str | None = None,
        temperature: float = 0.3,
        top_p: float = 0.9,
        max_tokens: int | None = None,
        retry_attempts: int = 3,
        client=None,
    ) -> None:
        self.model_name = model_name
        self.temperature = temperature
        self.top_p = top_p
        self.max_tokens = max_tokens
        self.retry_attempts = retry_attempts
        if client is None:
            from openai import OpenAI
            client = OpenAI(api_key=api_key or "not-needed", base_url=base_url)
        self._client = client

    def _create(self, messages: list[dict], max_tokens: int | None, temperature: float, stream: bool = False):
        import openai
        kwargs = {"model": self.model_name, "messages": messages, "temperature": temperature, "top_p": self.top_p}
        limit = max_tokens or self.max_tokens
        if limit:
            kwargs["max_tokens"] = limit
        try:
            return self._client.chat.completions.create(stream=stream, **kwargs)
        except openai.OpenAIError as e:
            raise _wrap(e, "stream answer" if stream else "generate answer") from e

    @staticmethod
    def _messages(system_prompt: str, user_prompt: str) -> list[dict]:
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

    def generate(self, system_prompt: str, context: str, question: str, max_tokens: int | None = None) -> str:
        messages = self._messages(system_prompt, build_user_prompt(context, question))
        resp = retry_call(lambda: self._create(messages, max_tokens, self.temperature), attempts=self.retry_attempts)
        return clean_answer(resp.choices[0].message.content or "")

    def complete(self, system_prompt: str, prompt: str, temperature: float = 0.7) -> str:
        messages = self._messages(system_prompt, prompt)
        resp = retry_call(lambda: self._create(messages, None, temperature), attempts=self.retry_attempts)
        return (resp.choices[0].message.content or "").strip()

    def generate_stream(
        self, system_prompt: str, context: str, question: str, max_tokens: int | None = None
    ) -> GenerationStream:
        messages = self._messages(system_prompt, build_user_prompt(context, question))
        response = retry_call(
            lambda: self._create(messages, max_tokens, self.temperature, stream=True),
            attempts=self.retry_attempts,
        )

        def fragments() -> Iterator[str]:
            import openai
            try:
                for event in response:
                    if not event.choices:
                        continue
                    delta = event.choices[0].delta.content
                    if delta:
                        yield delta
            except openai.OpenAIError as e:
                raise _wrap(e, "stream answer") from e

        return GenerationStream(fragments(), on_close=getattr(response, "close", None))
