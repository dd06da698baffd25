"""
Onboarding AI client.

Wraps Anthropic's Messages API for the two generative calls of the analysis
pipeline:
- project purpose extraction from a README excerpt
- onboarding roadmap generation from the aggregated analysis

Both force a tool call so the answer arrives as structured JSON. Purpose
output is validated against ``ProjectPurpose``; roadmap output is only
checked for a ``sections`` list and returned as a ``RawRoadmap`` for the
transformer to normalize.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar, cast

import anthropic
from anthropic import APIError, RateLimitError
from pydantic import ValidationError

from app.config import settings
from app.core.exceptions import UpstreamAIError
from app.schemas.analysis import DatabaseRequirement, EnvironmentVariable, ProjectPurpose, TechStack
from app.services.ai.prompts import (
    PURPOSE_TOOL_NAME,
    PURPOSE_TOOL_SCHEMA,
    ROADMAP_TOOL_NAME,
    ROADMAP_TOOL_SCHEMA,
    build_purpose_prompt,
    build_roadmap_prompt,
)
from app.services.roadmap_transformer import RawRoadmap

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_DELAYS = [2, 4, 8]

PURPOSE_MAX_TOKENS = 1024
ROADMAP_MAX_TOKENS = 16000

T = TypeVar("T")


@dataclass
class AnalysisBundle:
    """Aggregated analysis handed to roadmap generation."""

    tech_stack: TechStack
    database: list[DatabaseRequirement]
    env_vars: list[EnvironmentVariable]
    purpose: ProjectPurpose
    setup_instructions: str | None = None
    security_issues: list[Any] = field(default_factory=list)


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    operation_name: str = "API call",
) -> T:
    """Execute an async function with retry on Anthropic rate-limit / API errors.

    Raises:
        UpstreamAIError: After all retries are exhausted
    """
    last_error: Exception | None = None

    for attempt in range(MAX_RETRIES):
        try:
            return await fn()
        except (RateLimitError, APIError) as e:
            last_error = e
            if attempt < MAX_RETRIES - 1:
                delay = RETRY_DELAYS[attempt]
                logger.warning(
                    f"{operation_name} error (attempt {attempt + 1}/{MAX_RETRIES}), "
                    f"retrying in {delay}s: {e}"
                )
                await asyncio.sleep(delay)
            else:
                logger.error(f"{operation_name} failed after {MAX_RETRIES} attempts: {e}")

    raise UpstreamAIError(f"{operation_name} failed: {last_error}") from last_error


def _tool_input(response: anthropic.types.Message, tool_name: str) -> dict[str, Any] | None:
    for block in response.content:
        if block.type == "tool_use" and block.name == tool_name:
            return cast(dict[str, Any], block.input)
    return None


class OnboardingAIClient:
    """Generate project purpose and onboarding roadmaps with Claude."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self.model = model or settings.ai_model
        self.client = client or anthropic.AsyncAnthropic(
            api_key=api_key or settings.anthropic_api_key
        )

    async def _create(self, prompt: str, tool_schema: dict[str, Any], max_tokens: int) -> Any:
        return await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            tools=cast(Any, [tool_schema]),
            tool_choice=cast(Any, {"type": "tool", "name": tool_schema["name"]}),
            messages=[{"role": "user", "content": prompt}],
        )

    async def extract_project_purpose(
        self,
        readme_text: str,
        package_description: str | None = None,
        repo_description: str | None = None,
    ) -> ProjectPurpose:
        """
        Extract purpose, features, audience and type from a README.

        Raises:
            UpstreamAIError: The call failed or the answer did not validate
        """
        prompt = build_purpose_prompt(
            readme_text[: settings.readme_excerpt_chars],
            package_description,
            repo_description,
        )
        response = await call_with_retry(
            lambda: self._create(prompt, PURPOSE_TOOL_SCHEMA, PURPOSE_MAX_TOKENS),
            operation_name="Project purpose extraction",
        )

        data = _tool_input(response, PURPOSE_TOOL_NAME)
        if data is None:
            logger.warning(f"Claude did not return a {PURPOSE_TOOL_NAME} tool use")
            raise UpstreamAIError("Failed to extract project purpose from README")

        try:
            return ProjectPurpose.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid project purpose from Claude: {e}")
            raise UpstreamAIError("Failed to extract project purpose from README") from e

    async def generate_roadmap(self, bundle: AnalysisBundle) -> RawRoadmap:
        """
        Generate a raw onboarding roadmap.

        Individual tasks may be incomplete; only the top-level ``sections``
        list is required here.

        Raises:
            UpstreamAIError: The call failed or no sections were returned
        """
        prompt = build_roadmap_prompt(
            bundle.tech_stack,
            bundle.database,
            bundle.env_vars,
            bundle.purpose,
            setup_instructions=bundle.setup_instructions,
            security_issues=bundle.security_issues,
        )
        logger.info(f"Generating roadmap with {len(prompt)} chars of context")

        response = await call_with_retry(
            lambda: self._create(prompt, ROADMAP_TOOL_SCHEMA, ROADMAP_MAX_TOKENS),
            operation_name="Roadmap generation",
        )

        data = _tool_input(response, ROADMAP_TOOL_NAME)
        if data is None or not isinstance(data.get("sections"), list):
            logger.warning("Claude returned no usable roadmap sections")
            raise UpstreamAIError("Failed to generate onboarding roadmap")

        return RawRoadmap(data=data)
