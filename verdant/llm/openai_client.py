"""
OpenAI Narrative Client for Verdant.

This module provides the real LLM implementation using OpenAI's API.
It implements the NarrativeClient Protocol with a plain text completion.

Requires OPENAI_API_KEY environment variable to be set.
"""

import logging
import os
from typing import Optional

import openai
from openai import OpenAI

from verdant.config import DEFAULT_LLM_CONFIG, LLMConfig
from verdant.exceptions import UpstreamUnavailable
from verdant.llm.prompts import format_recommendation_system, format_recommendation_user
from verdant.models import SummaryContext

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Raised when LLM call fails."""

    pass


class OpenAINarrativeClient:
    """
    OpenAI narrative client implementing the NarrativeClient Protocol.

    Attributes:
        config: LLM configuration (model, temperature, max_tokens)
        client: OpenAI client instance

    Example:
        ```python
        client = OpenAINarrativeClient()
        text = client.generate_recommendation(build_summary_context(result))
        ```
    """

    def __init__(
        self,
        config: LLMConfig = DEFAULT_LLM_CONFIG,
        api_key: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ):
        """
        Initialize OpenAI client.

        Args:
            config: LLM configuration (defaults to DEFAULT_LLM_CONFIG)
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            client: Pre-built OpenAI client (tests)

        Raises:
            ValueError: If no API key is provided or found in environment
        """
        self.config = config

        if client is not None:
            self.client = client
            return

        key = api_key or os.environ.get("OPENAI_API_KEY")
        if not key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.client = OpenAI(api_key=key)

    def _call_text(
        self,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """
        Make a text-only LLM call.

        Args:
            system_prompt: System message content
            user_prompt: User message content

        Returns:
            Text response content

        Raises:
            UpstreamUnavailable: If API is unreachable or returns 5xx
            LLMError: If API call fails
        """
        try:
            response = self.client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.config.temperature,
                max_completion_tokens=self.config.max_tokens,
            )

            content = response.choices[0].message.content
            if content is None:
                raise LLMError("LLM returned empty response")

            return content

        except openai.APIConnectionError as e:
            # Network-level failure - infrastructure error
            raise UpstreamUnavailable(f"Cannot reach OpenAI API: {e}") from e
        except openai.APIStatusError as e:
            if e.status_code >= 500:
                raise UpstreamUnavailable(f"OpenAI API error ({e.status_code}): {e}") from e
            # 4xx errors are likely our fault (bad request, etc.)
            raise LLMError(f"OpenAI API call failed ({e.status_code}): {e}") from e
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(f"OpenAI API call failed: {e}") from e

    def generate_recommendation(self, context: SummaryContext) -> str:
        """
        Generate a sectioned recommendation for a calculation snapshot.

        Args:
            context: Structured snapshot of the latest result

        Returns:
            Free-text recommendation

        Raises:
            UpstreamUnavailable: If the API is unreachable
            LLMError: If API call fails
        """
        system_prompt = format_recommendation_system()
        user_prompt = format_recommendation_user(context)

        text = self._call_text(system_prompt, user_prompt)
        logger.info(
            f"LLM generated recommendation for generation={context.generation} "
            f"({len(text)} chars, model={self.config.model})"
        )
        return text
