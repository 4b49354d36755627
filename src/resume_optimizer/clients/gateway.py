"""Model gateway: resume + instructions in, resume document out.

The workflow only sees :class:`ModelGateway`; :class:`AnthropicGateway` is
the production implementation on top of :class:`LLMClient`. Every failure
leaves here as a :class:`GatewayError` with a coarse classification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import anthropic

from resume_optimizer.clients.llm_client import LLMClient
from resume_optimizer.config import LLMConfig, PromptConfig
from resume_optimizer.errors import GatewayError, GatewayErrorKind
from resume_optimizer.prompts import (
    build_adjustment_prompt,
    build_conversion_prompt,
    build_optimization_prompt,
)
from resume_optimizer.workflow.state import OperationMode

logger = logging.getLogger(__name__)

# Keys a model sometimes wraps the resume in.
RESULT_WRAPPERS = ("optimizedResume", "adjustedResume", "resume")


@dataclass
class GatewayResult:
    document: dict
    metadata: Any = None


class ModelGateway(Protocol):
    @property
    def has_credential(self) -> bool: ...

    async def invoke(
        self,
        resume: dict | None,
        instructions: str,
        *,
        mode: OperationMode,
        prompt_override: str | None = None,
    ) -> GatewayResult: ...


def classify_exception(exc: BaseException) -> GatewayError:
    """Map any failure raised during a model call onto a GatewayError."""
    if isinstance(exc, GatewayError):
        return exc

    details = str(exc) or exc.__class__.__name__
    if isinstance(exc, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        kind = GatewayErrorKind.AUTH_FAILURE
    elif isinstance(exc, anthropic.RateLimitError):
        kind = GatewayErrorKind.QUOTA_EXCEEDED
    elif isinstance(exc, anthropic.APIConnectionError):
        kind = GatewayErrorKind.NETWORK_FAILURE
    elif isinstance(exc, ValueError):
        kind = GatewayErrorKind.PARSE_FAILURE
    else:
        kind = _classify_message(details.lower())
    return GatewayError(kind, details=details)


def _classify_message(message: str) -> GatewayErrorKind:
    if "api key" in message or "api_key" in message or "authentication" in message:
        return GatewayErrorKind.AUTH_FAILURE
    if "quota" in message or "rate limit" in message:
        return GatewayErrorKind.QUOTA_EXCEEDED
    if "fetch" in message or "connection" in message or "network" in message:
        return GatewayErrorKind.NETWORK_FAILURE
    return GatewayErrorKind.UNKNOWN


def unwrap_result(payload: dict) -> GatewayResult:
    """Split a parsed model response into resume document and metadata."""
    metadata = payload.get("metadata")
    for key in RESULT_WRAPPERS:
        inner = payload.get(key)
        if isinstance(inner, dict):
            return GatewayResult(document=inner, metadata=metadata)
    if "metadata" in payload and "basics" in payload:
        document = {k: v for k, v in payload.items() if k != "metadata"}
        return GatewayResult(document=document, metadata=metadata)
    return GatewayResult(document=payload)


class AnthropicGateway:
    """Gateway backed by the Claude API."""

    def __init__(
        self,
        llm: LLMClient | None,
        *,
        models: LLMConfig | None = None,
        prompts: PromptConfig | None = None,
    ):
        self.llm = llm
        self.models = models or LLMConfig()
        self.prompts = prompts or PromptConfig()

    @classmethod
    def from_api_key(
        cls,
        api_key: str | None,
        *,
        models: LLMConfig | None = None,
        prompts: PromptConfig | None = None,
    ) -> AnthropicGateway:
        """Build a gateway; without a key the gateway reports no credential."""
        models = models or LLMConfig()
        llm = None
        if api_key:
            llm = LLMClient(
                api_key=api_key,
                timeout=models.timeout,
                max_retries=models.max_retries,
            )
        return cls(llm, models=models, prompts=prompts)

    @property
    def has_credential(self) -> bool:
        return self.llm is not None

    def _request(
        self,
        resume: dict | None,
        instructions: str,
        mode: OperationMode,
        prompt_override: str | None,
    ) -> tuple[str, str, str]:
        if mode is OperationMode.OPTIMIZE:
            override = prompt_override or self.prompts.optimization_prompt
            system, prompt = build_optimization_prompt(resume or {}, instructions, override)
            return system, prompt, self.models.optimize_model
        if mode is OperationMode.ADJUST:
            override = prompt_override or self.prompts.adjustment_prompt
            system, prompt = build_adjustment_prompt(resume or {}, instructions, override)
            return system, prompt, self.models.adjust_model
        override = prompt_override or self.prompts.conversion_prompt
        system, prompt = build_conversion_prompt(instructions, override)
        return system, prompt, self.models.convert_model

    async def invoke(
        self,
        resume: dict | None,
        instructions: str,
        *,
        mode: OperationMode,
        prompt_override: str | None = None,
    ) -> GatewayResult:
        if self.llm is None:
            raise GatewayError(
                GatewayErrorKind.AUTH_FAILURE, details="No API key configured"
            )

        system, prompt, model = self._request(resume, instructions, mode, prompt_override)
        logger.debug("Gateway %s request: model=%s", mode.value, model)
        try:
            payload = await self.llm.generate_json(
                prompt=prompt,
                system=system,
                model=model,
                temperature=self.models.temperature,
                max_tokens=self.models.max_tokens,
            )
        except GatewayError:
            raise
        except Exception as exc:
            error = classify_exception(exc)
            logger.error("Gateway %s failed (%s): %s", mode.value, error.kind.value, error.details)
            raise error from exc

        return unwrap_result(payload)

    async def verify_credential(self) -> bool:
        """Check the key with a one-token request."""
        if self.llm is None:
            raise GatewayError(
                GatewayErrorKind.AUTH_FAILURE, details="No API key configured"
            )
        try:
            await self.llm.ping(model=self.models.adjust_model)
        except Exception as exc:
            raise classify_exception(exc) from exc
        return True
