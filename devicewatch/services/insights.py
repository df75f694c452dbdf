"""
External insight client
Wraps the Gemini text-generation API with a rotating pool of API keys and
turns generated text into structured insight payloads
"""

import asyncio
import json
import re
from typing import Any, List, Optional, Sequence, Type, TypeVar
from urllib.parse import quote

import aiohttp
import structlog
from pydantic import BaseModel, ValidationError

from devicewatch.core.errors import (
    AllKeysExhausted,
    InsightError,
    MalformedUpstreamResponse,
    QuotaExhausted,
    ServiceUnconfigured,
    UpstreamError,
)
from devicewatch.schemas.insights import (
    Explanation,
    MaintenanceInsight,
    RiskAssessment,
    SystemSummary,
    VoiceAlert,
)
from devicewatch.services import prompts
from devicewatch.services.prompts import PromptContext, build_prompt

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

QUOTA_MARKERS = ("429", "quota", "limit")

RISK_FALLBACK = RiskAssessment(risk_level="UNKNOWN", confidence=0, reason="AI analysis failed.")
EXPLANATION_FALLBACK = Explanation(
    explanation="Unable to generate explanation. Please check device readings manually."
)
MAINTENANCE_FALLBACK = MaintenanceInsight(
    maintenance_required=False, suggested_action="Manual inspection recommended."
)
SUMMARY_FALLBACK = SystemSummary(overall_status="UNKNOWN", devices_at_risk=0, summary="Unable to generate summary.")
CHAT_FALLBACK = "I'm having trouble analyzing the data right now."

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


class _Part(BaseModel):
    text: str = ""


class _Content(BaseModel):
    parts: List[_Part]


class _Candidate(BaseModel):
    content: _Content


class _GenerateContentReply(BaseModel):
    """Subset of the generateContent response body that carries text"""
    candidates: List[_Candidate]


class CredentialPool:
    """Ordered API keys with a shared rotation cursor.

    The cursor is read and advanced without locking. Concurrent generate()
    calls may skip or reuse a key out of strict round-robin order, which
    costs at most a wasted attempt.
    """

    def __init__(self, keys: Sequence[str]):
        self.keys = [key for key in keys if key]
        self.cursor = 0

    def __len__(self):
        return len(self.keys)

    def current(self) -> str:
        return self.keys[self.cursor]

    def advance(self) -> int:
        if self.keys:
            self.cursor = (self.cursor + 1) % len(self.keys)
        return self.cursor


class GeminiTransport:
    """Single generateContent call against the Gemini REST API"""

    def __init__(self, api_url: str, model: str, timeout: int = 30):
        self.endpoint = f"{api_url.rstrip('/')}/models/{model}:generateContent"
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def generate(self, api_key: str, prompt: str) -> str:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout)

        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}
        try:
            async with self.session.post(self.endpoint, json=payload, headers=headers) as response:
                if response.status == 429:
                    raise QuotaExhausted(await _error_message(response), status=429)
                if response.status >= 400:
                    raise UpstreamError(await _error_message(response), status=response.status)
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise MalformedUpstreamResponse("Gemini response is not valid JSON") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(f"Gemini request failed: {e!r}") from e

        try:
            candidate = _GenerateContentReply.model_validate(data).candidates[0]
        except (ValidationError, IndexError) as e:
            raise MalformedUpstreamResponse("Gemini response has no candidate text") from e
        return "".join(part.text for part in candidate.content.parts)

    async def close(self):
        if self.session is not None and not self.session.closed:
            await self.session.close()
        self.session = None


async def _error_message(response: aiohttp.ClientResponse) -> str:
    body = await response.text()
    try:
        error = json.loads(body).get("error", {})
        return f"{response.status} {error.get('status', '')}: {error.get('message', '')}".strip()
    except (ValueError, AttributeError):
        return f"{response.status} {body[:200]}"


def is_quota_error(error: Exception) -> bool:
    """Rate-limit and quota failures are retried on the next key"""
    if isinstance(error, QuotaExhausted):
        return True
    if getattr(error, "status", None) == 429:
        return True
    message = str(error).lower()
    return any(marker in message for marker in QUOTA_MARKERS)


def strip_code_fence(text: str) -> str:
    """Remove markdown code-fence markers around generated JSON"""
    return _FENCE.sub("", text).strip()


def parse_json_object(text: str, model: Type[T]) -> T:
    try:
        return model.model_validate(json.loads(strip_code_fence(text)))
    except (ValueError, ValidationError) as e:
        raise MalformedUpstreamResponse(f"Generated text is not a valid {model.__name__}") from e


class InsightClient:
    """Insight operations backed by the text-generation service.

    ``generate`` raises on failure; every other public method always returns
    a payload of its documented shape, falling back to a fixed default.
    """

    def __init__(
        self,
        pool: CredentialPool,
        transport,
        tts_url: str = "https://translate.google.com/translate_tts",
        voice_max_chars: int = 200,
    ):
        self.pool = pool
        self.transport = transport
        self.tts_url = tts_url
        self.voice_max_chars = voice_max_chars

        if not self.pool:
            logger.warning("No Gemini API keys configured, insights will use fallbacks")
        else:
            logger.info("Gemini API keys loaded", key_count=len(self.pool))

    @classmethod
    def from_settings(cls, settings) -> "InsightClient":
        transport = GeminiTransport(settings.gemini_api_url, settings.gemini_model, settings.gemini_timeout)
        return cls(
            CredentialPool(settings.gemini_api_keys),
            transport,
            tts_url=settings.tts_url,
            voice_max_chars=settings.voice_max_chars,
        )

    @property
    def configured(self) -> bool:
        return len(self.pool) > 0

    async def close(self):
        await self.transport.close()

    async def generate(self, prompt: str, max_attempts: Optional[int] = None) -> str:
        """Generate text, rotating to the next key on quota errors"""
        if not self.configured:
            raise ServiceUnconfigured("AI service not configured.")

        attempts = max_attempts if max_attempts is not None else len(self.pool)
        attempts = max(attempts, 1)
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            key_index = self.pool.cursor
            try:
                return await self.transport.generate(self.pool.current(), prompt)
            except UpstreamError as e:
                if not is_quota_error(e):
                    logger.error("Gemini API error", key_index=key_index + 1, status=e.status, error=e.message)
                    raise
                last_error = e
                self.pool.advance()
                logger.warning(
                    "Gemini quota reached, rotating key",
                    key_index=key_index + 1,
                    next_key_index=self.pool.cursor + 1,
                    attempt=attempt,
                )

        raise AllKeysExhausted(f"All API keys exhausted after {attempts} attempts") from last_error

    async def _structured(self, operation: str, prompt: str, model: Type[T], fallback: T) -> T:
        try:
            return parse_json_object(await self.generate(prompt), model)
        except InsightError as e:
            logger.error("Insight generation failed", operation=operation, error=str(e), error_type=type(e).__name__)
        except Exception as e:
            logger.error("Unexpected insight failure", operation=operation, error=str(e), exc_info=True)
        return fallback.model_copy()

    async def risk_assessment(self, readings: List[Any], lang: str = prompts.DEFAULT_LANGUAGE) -> RiskAssessment:
        prompt = build_prompt(prompts.RISK, PromptContext(readings=readings), lang, ["reason"])
        return await self._structured("risk", prompt, RiskAssessment, RISK_FALLBACK)

    async def explanation(self, device_id: str, readings: List[Any], lang: str = prompts.DEFAULT_LANGUAGE) -> Explanation:
        context = PromptContext(device_id=device_id, readings=readings)
        prompt = build_prompt(prompts.EXPLANATION, context, lang, ["explanation"])
        return await self._structured("explanation", prompt, Explanation, EXPLANATION_FALLBACK)

    async def maintenance_insight(
        self, device_id: str, history: List[Any], lang: str = prompts.DEFAULT_LANGUAGE
    ) -> MaintenanceInsight:
        context = PromptContext(device_id=device_id, readings=history)
        prompt = build_prompt(prompts.MAINTENANCE, context, lang, ["suggested_action"])
        return await self._structured("maintenance", prompt, MaintenanceInsight, MAINTENANCE_FALLBACK)

    async def system_summary(self, devices: List[Any], lang: str = prompts.DEFAULT_LANGUAGE) -> SystemSummary:
        prompt = build_prompt(prompts.SUMMARY, PromptContext(system_data=devices), lang, ["summary", "overall_status"])
        return await self._structured("summary", prompt, SystemSummary, SUMMARY_FALLBACK)

    async def chat_response(self, device_id: str, history: List[Any], query: str) -> str:
        """Free-text answer; not JSON-wrapped"""
        prompt = build_prompt(prompts.CHAT, PromptContext(device_id=device_id, readings=history, query=query))
        try:
            return await self.generate(prompt)
        except InsightError as e:
            logger.error("Insight generation failed", operation="chat", error=str(e), error_type=type(e).__name__)
        except Exception as e:
            logger.error("Unexpected insight failure", operation="chat", error=str(e), exc_info=True)
        return CHAT_FALLBACK

    async def voice_alert(self, device_id: str, readings: List[Any], lang: str = prompts.DEFAULT_LANGUAGE) -> VoiceAlert:
        explanation = await self.explanation(device_id, readings, lang)
        text = explanation.explanation[: self.voice_max_chars]
        return VoiceAlert(text=text, audio_url=self.audio_url(text, lang))

    def audio_url(self, text: str, lang: str = prompts.DEFAULT_LANGUAGE) -> str:
        # Unreserved characters and !~*'() stay literal, everything else is percent-encoded
        encoded = quote(text, safe="!~*'()")
        return f"{self.tts_url}?ie=UTF-8&q={encoded}&tl={quote(lang, safe='')}&client=tw-ob"
