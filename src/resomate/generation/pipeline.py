import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from resomate.config import Settings, TierProfile, get_settings
from resomate.generation import prompts
from resomate.generation.fallback import fallback_resolution, fallback_rhetoric, fallback_speech
from resomate.generation.models import (
    Content,
    DocumentKind,
    EmptyContentError,
    Failure,
    FailureKind,
    GenerationRequest,
    GenerationResult,
    SpeechContent,
    Success,
)
from resomate.generation.parsing import parse_resolution, parse_rhetoric, parse_speech
from resomate.generation.retry import RetryExhaustedError, Sleep, retry_with_backoff
from resomate.providers.llm.chat import ChatCompleter, OpenAIChatClient
from resomate.utils.errors import extract_error_detail

logger = logging.getLogger(__name__)

PRIMARY = "primary"
SECONDARY = "secondary"
FALLBACK = "fallback"


@dataclass(frozen=True)
class TierOutcome:
    tier: str
    content: Content | None = None
    error: BaseException | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.content is not None


class Strategy(Protocol):
    name: str

    async def run(self, request: GenerationRequest) -> TierOutcome: ...


class ModelStrategy:
    """One model-backed tier: ``produce`` wrapped in bounded exponential backoff."""

    def __init__(
        self,
        name: str,
        produce: Callable[[GenerationRequest], Awaitable[Content]],
        max_attempts: int,
        base_delay: float,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.name = name
        self.produce = produce
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.sleep = sleep

    async def run(self, request: GenerationRequest) -> TierOutcome:
        try:
            content, attempts = await retry_with_backoff(
                lambda: self.produce(request),
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                sleep=self.sleep,
                label=f"{request.kind.value}.{self.name}",
            )
        except RetryExhaustedError as exc:
            return TierOutcome(tier=self.name, error=exc.last_error, attempts=exc.attempts)
        return TierOutcome(tier=self.name, content=content, attempts=attempts)


class TemplateStrategy:
    def __init__(self, build: Callable[[GenerationRequest], Content], name: str = FALLBACK) -> None:
        self.name = name
        self.build = build

    async def run(self, request: GenerationRequest) -> TierOutcome:
        return TierOutcome(tier=self.name, content=self.build(request), attempts=1)


class GenerationPipeline:
    """Tiered generation: primary model, secondary model, then local templates.

    Tiers run strictly in order and a tier is never revisited once the
    cascade has moved past it. Transitions are logged and counted in
    ``tier_counts`` keyed by ``(kind, tier, outcome)``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: ChatCompleter | None = None,
        sleep: Sleep = asyncio.sleep,
        strategies: dict[DocumentKind, list[Strategy]] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client or OpenAIChatClient(self.settings)
        self.sleep = sleep
        self.strategies = strategies if strategies is not None else self._default_strategies()
        self.tier_counts: Counter[tuple[str, str, str]] = Counter()

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        kind = request.kind.value
        last_error: BaseException | None = None
        for strategy in self.strategies.get(request.kind, []):
            outcome = await strategy.run(request)
            if outcome.ok:
                self.tier_counts[(kind, outcome.tier, "succeeded")] += 1
                logger.info(
                    "generation.tier.succeeded kind=%s tier=%s attempts=%d",
                    kind,
                    outcome.tier,
                    outcome.attempts,
                )
                return Success(content=outcome.content, tier=outcome.tier, attempts=outcome.attempts)
            self.tier_counts[(kind, outcome.tier, "failed")] += 1
            last_error = outcome.error
            logger.warning(
                "generation.tier.failed kind=%s tier=%s attempts=%d type=%s detail=%s",
                kind,
                outcome.tier,
                outcome.attempts,
                last_error.__class__.__name__,
                extract_error_detail(last_error) if last_error is not None else "",
            )
        failure = classify_failure(last_error)
        logger.error("generation.exhausted kind=%s failure=%s", kind, failure.kind.value)
        return failure

    def _default_strategies(self) -> dict[DocumentKind, list[Strategy]]:
        primary = self.settings.primary_tier
        secondary = self.settings.secondary_tier
        return {
            DocumentKind.RESOLUTION: [
                self._model_strategy(PRIMARY, primary, self._resolution(prompts.resolution_primary, primary)),
                self._model_strategy(SECONDARY, secondary, self._resolution(prompts.resolution_secondary, secondary)),
                TemplateStrategy(fallback_resolution),
            ],
            DocumentKind.SPEECH: [
                self._model_strategy(PRIMARY, primary, self._speech_with_rhetoric(primary)),
                self._model_strategy(SECONDARY, secondary, self._speech_only(secondary)),
                TemplateStrategy(fallback_speech),
            ],
            DocumentKind.RHETORIC: [
                self._model_strategy(PRIMARY, primary, self._rhetoric(prompts.rhetoric_primary, primary)),
                self._model_strategy(SECONDARY, secondary, self._rhetoric(prompts.rhetoric_secondary, secondary)),
                TemplateStrategy(fallback_rhetoric),
            ],
        }

    def _model_strategy(
        self,
        name: str,
        profile: TierProfile,
        produce: Callable[[GenerationRequest], Awaitable[Content]],
    ) -> ModelStrategy:
        return ModelStrategy(
            name,
            produce,
            max_attempts=profile.max_attempts,
            base_delay=profile.base_delay_seconds,
            sleep=self.sleep,
        )

    async def _ask(self, messages: prompts.Messages, profile: TierProfile, rhetoric: bool = False) -> str:
        temperature = self.settings.rhetoric_temperature if rhetoric else profile.temperature
        max_tokens = self.settings.rhetoric_max_tokens if rhetoric else profile.max_tokens
        text = await self.client.complete(messages, profile.model, temperature, max_tokens)
        if not text or not text.strip():
            raise EmptyContentError("No content generated")
        return text

    def _resolution(self, build: Callable[[GenerationRequest], prompts.Messages], profile: TierProfile):
        async def produce(request: GenerationRequest) -> Content:
            return parse_resolution(await self._ask(build(request), profile))

        return produce

    def _rhetoric(self, build: Callable[[GenerationRequest], prompts.Messages], profile: TierProfile):
        async def produce(request: GenerationRequest) -> Content:
            return parse_rhetoric(await self._ask(build(request), profile, rhetoric=True))

        return produce

    def _speech_with_rhetoric(self, profile: TierProfile):
        async def produce(request: GenerationRequest) -> Content:
            # the first failure cancels its sibling so no call outlives the attempt
            try:
                async with asyncio.TaskGroup() as group:
                    speech_task = group.create_task(self._ask(prompts.speech_primary(request), profile))
                    rhetoric_task = group.create_task(
                        self._ask(prompts.rhetoric_primary(request), profile, rhetoric=True)
                    )
            except ExceptionGroup as failed:
                raise failed.exceptions[0]
            speech = parse_speech(speech_task.result())
            rhetoric = parse_rhetoric(rhetoric_task.result())
            return SpeechContent(title=speech.title, body=speech.body, rhetoric_inserts=rhetoric.devices)

        return produce

    def _speech_only(self, profile: TierProfile):
        async def produce(request: GenerationRequest) -> Content:
            speech = parse_speech(await self._ask(prompts.speech_secondary(request), profile))
            return SpeechContent(
                title=speech.title,
                body=speech.body,
                rhetoric_inserts=fallback_rhetoric(request).devices,
            )

        return produce


def classify_failure(error: BaseException | None) -> Failure:
    if error is None:
        return Failure(kind=FailureKind.GENERAL_ERROR, message="no generation strategy available")
    detail = extract_error_detail(error)
    message = f"{error.__class__.__name__}: {detail}"
    type_name = error.__class__.__name__.lower()
    text = str(error).lower()
    if isinstance(error, EmptyContentError):
        return Failure(kind=FailureKind.EMPTY_CONTENT, message=message)
    if isinstance(error, TimeoutError) or "timeout" in type_name or "timed out" in text:
        return Failure(kind=FailureKind.SERVICE_TIMEOUT, message=message)
    if getattr(error, "status_code", None) == 429 or "ratelimit" in type_name or "rate limit" in text:
        return Failure(kind=FailureKind.RATE_LIMITED, message=message)
    return Failure(kind=FailureKind.GENERAL_ERROR, message=message)
