from __future__ import annotations

"""
Thin OpenAI client wrapper.

Usage:
- Set OPENAI_API_KEY in env.
- Configure model via OPENAI_CHAT_MODEL (default: gpt-4o-mini) and the
  request timeout via OPENAI_TIMEOUT_SECONDS (default: 60).
"""

import json
import os
from typing import Any, Dict, Optional

import openai
from openai import OpenAI

from rowplan.agents.errors import GenerationError, GenerationErrorKind


def _strip_code_fence(content: str) -> str:
    content_str = content.strip()
    # Handle fenced code blocks
    if content_str.startswith("```"):
        content_str = content_str.strip("`\n")
        # Remove optional json hint
        if content_str.startswith("json\n"):
            content_str = content_str[5:]
    return content_str


class OpenAIClient:
    def __init__(self) -> None:
        self.api_key = os.getenv("OPENAI_API_KEY")
        self.chat_model = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")
        self.config_error: Optional[str] = None
        self.client = None

        raw_timeout = os.getenv("OPENAI_TIMEOUT_SECONDS", "60")
        try:
            self.timeout = float(raw_timeout)
        except ValueError:
            self.timeout = None
            self.config_error = f"OPENAI_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}"
            return

        if not self.api_key:
            self.config_error = "OPENAI_API_KEY is not set"
            return

        # Single attempt per generation: the SDK's own retries are turned off.
        try:
            self.client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        except openai.OpenAIError as e:
            self.config_error = f"could not configure OpenAI client: {e}"

    def available(self) -> bool:
        return self.client is not None

    def chat_json(
        self,
        user: str,
        schema: Dict[str, Any],
        schema_name: str,
        system: Optional[str] = None,
    ) -> Any:
        """
        Call the chat model with a strict JSON schema response format and
        parse the reply.

        Raises GenerationError with PROVIDER_UNAVAILABLE when the call cannot
        be made or fails, and INVALID_RESPONSE_SHAPE when the reply is not JSON.
        """
        if not self.client:
            raise GenerationError(GenerationErrorKind.PROVIDER_UNAVAILABLE, self.config_error or "client unavailable")

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": user})

        try:
            resp = self.client.chat.completions.create(
                model=self.chat_model,
                messages=messages,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": schema, "strict": True},
                },
                temperature=0.2,
            )
        except openai.APIError as e:
            raise GenerationError(
                GenerationErrorKind.PROVIDER_UNAVAILABLE,
                f"{type(e).__name__}: {e}",
            ) from e

        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            raise GenerationError(GenerationErrorKind.INVALID_RESPONSE_SHAPE, "empty completion")

        try:
            return json.loads(_strip_code_fence(content))
        except json.JSONDecodeError as e:
            raise GenerationError(
                GenerationErrorKind.INVALID_RESPONSE_SHAPE,
                f"reply is not JSON ({e.msg} at position {e.pos})",
            ) from e
