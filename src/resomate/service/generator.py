import logging
from typing import Any

from resomate.generation.models import Failure, GenerationRequest
from resomate.generation.pipeline import FALLBACK, GenerationPipeline

logger = logging.getLogger(__name__)


class GenerateService:
    def __init__(self, pipeline: GenerationPipeline | None = None) -> None:
        self.pipeline = pipeline or GenerationPipeline()

    async def generate(self, request: GenerationRequest) -> dict:
        kind = request.kind.value
        try:
            result = await self.pipeline.generate(request)
        except Exception as exc:
            logger.exception("generate.failed kind=%s topic=%s", kind, request.topic)
            return {"kind": kind, "content": None, "meta": {"error": self._error_payload(exc)}}

        if isinstance(result, Failure):
            logger.info("generate.meta kind=%s failure=%s", kind, result.kind.value)
            return {
                "kind": kind,
                "content": None,
                "meta": {
                    "error": {
                        "type": result.kind.value,
                        "message": result.user_message,
                        "detail": result.message,
                    }
                },
            }

        logger.info(
            "generate.meta kind=%s tier=%s attempts=%d topic=%s",
            kind,
            result.tier,
            result.attempts,
            request.topic,
        )
        return {
            "kind": kind,
            "content": result.content.model_dump(mode="json"),
            "meta": {
                "tier": result.tier,
                "attempts": result.attempts,
                "fallback_used": result.tier == FALLBACK,
            },
        }

    @staticmethod
    def _error_payload(exc: Exception) -> dict[str, Any]:
        return {
            "type": "general_error",
            "message": "Generation failed. Please try again.",
            "detail": f"{exc.__class__.__name__}: {exc}",
        }
