"""
Completion Module - Single Responsibility: turn a prompt into answer text.

The assembled prompt already carries the grounding instructions, so the
provider sends it as a single user message and returns the raw text.
"""

import os
import re

from openai import OpenAI

from blog_rag.context.assembler import NO_CONTEXT_MARKER
from blog_rag.core import CompletionProvider

DEFAULT_COMPLETION_MODEL = "gpt-4o-mini"


class OpenAICompletion:
    """OpenAI chat-completions provider."""

    system = "openai"

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 600,
        timeout: float | None = None,
    ):
        self.model = model or os.environ.get("COMPLETION_MODEL", DEFAULT_COMPLETION_MODEL)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = OpenAI(
            api_key=api_key or os.environ.get("OPENAI_API_KEY"),
            timeout=timeout,
            max_retries=0,
        )

    def complete(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""


_FIRST_BLOCK_RE = re.compile(
    r"^### (?P<title>[^\n]+)\n.*?^URL: (?P<url>\S+)$",
    re.MULTILINE | re.DOTALL,
)

INSUFFICIENT_CONTEXT_ANSWER = (
    "I couldn't find anything on the blog that covers that, so I can't "
    "answer it from the posts I have."
)


class MockCompletion:
    """
    Deterministic completion provider for tests and offline demos.

    Answers from the first context block it finds, or with a fixed
    insufficient-context reply when the prompt carries the no-content marker.
    NOT for production use.
    """

    system = "mock"
    model = "mock-completion"

    def __init__(self):
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if NO_CONTEXT_MARKER in prompt:
            return INSUFFICIENT_CONTEXT_ANSWER

        match = _FIRST_BLOCK_RE.search(prompt)
        if match is None:
            return INSUFFICIENT_CONTEXT_ANSWER
        return (
            f'The post "{match.group("title")}" ({match.group("url")}) '
            "covers this topic."
        )


def get_completion_provider(use_mock: bool = False, timeout: float | None = None) -> CompletionProvider:
    """
    Factory function to get the appropriate completion provider.

    Args:
        use_mock: If True, return MockCompletion (for testing)
        timeout: HTTP timeout for the OpenAI client
    """
    if use_mock:
        return MockCompletion()
    return OpenAICompletion(timeout=timeout)
