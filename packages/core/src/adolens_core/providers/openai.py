"""OpenAI chat-completion reviewer.

One review request is exactly one blocking, non-streaming completion call.
There is no retry: a failed call surfaces as UpstreamError or
EmptyResponseError and the caller reports a failed review.
"""

from __future__ import annotations

import logging

from openai import APIError, APIStatusError, OpenAI

from adolens_core.config import require_setting
from adolens_core.errors import EmptyResponseError, UpstreamError
from adolens_core.prompts import FileReviewInput, build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)


class OpenAIReviewer:
    MODEL = "gpt-4"
    # Low temperature keeps the JSON structure consistent across runs.
    TEMPERATURE = 0.3
    MAX_TOKENS = 4000
    TIMEOUT = 60

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        max_chars_per_file: int | None = 20000,
        client=None,
    ):
        require_setting({"openai_api_key": api_key}, "openai_api_key")
        self.model = model or self.MODEL
        self.temperature = self.TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or self.MAX_TOKENS
        self.max_chars_per_file = max_chars_per_file
        self.client = client or OpenAI(api_key=api_key, timeout=timeout or self.TIMEOUT, max_retries=0)

    @classmethod
    def from_config(cls, config: dict, client=None) -> OpenAIReviewer:
        return cls(
            api_key=require_setting(config, "openai_api_key"),
            model=config.get("model"),
            temperature=config.get("temperature"),
            max_tokens=config.get("max_tokens"),
            timeout=config.get("request_timeout"),
            max_chars_per_file=config.get("max_chars_per_file", 20000),
            client=client,
        )

    def review(self, files: list[FileReviewInput], pr_context: str | None = None) -> str:
        """Send every selected file in one request and return the raw model text."""
        system = build_system_prompt()
        user = build_user_prompt(files, pr_context, self.max_chars_per_file)
        logger.debug("Review prompt for %d file(s), %d chars:\n%s", len(files), len(user), user)
        return self._call_api(system, user)

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                stream=False,
            )
        except APIStatusError as e:
            logger.error("OpenAI API returned %s: %s", e.status_code, e)
            raise UpstreamError(f"OpenAI API error: {e.status_code}", status_code=e.status_code) from e
        except APIError as e:
            # Connection failures and timeouts carry no status code.
            logger.error("OpenAI request failed: %s", e)
            raise UpstreamError(f"OpenAI request failed: {e}") from e

        choices = response.choices or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise EmptyResponseError("No content received from OpenAI")
        return content
