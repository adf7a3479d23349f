"""
Ranking Service for PersonaRank Chat

Asks the generative backend to simulate one answer per persona and score
them, validates whatever shape comes back, and picks the best answer.
"""

import logging
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from ..models.ranking import PersonaSpec, RankedResponseItem, RankingResult
from ..personas import DEFAULT_PERSONAS
from ..utils.data_uri import parse_data_uri, require_mime_prefix
from ..utils.debug_logger import debug_logger
from .genai_backend import GeminiBackend
from .prompt_engineering import PromptEngineer, prompt_engineer as default_prompt_engineer

logger = logging.getLogger(__name__)


def _coerce_item(value: Any) -> Optional[RankedResponseItem]:
    """Validate one backend object, clamping the score into [0, 1]"""
    if not isinstance(value, dict):
        return None

    data = dict(value)
    accuracy = data.get("accuracy")
    if isinstance(accuracy, bool) or not isinstance(accuracy, (int, float)):
        return None
    data["accuracy"] = min(max(float(accuracy), 0.0), 1.0)

    try:
        return RankedResponseItem.model_validate(data)
    except ValidationError:
        return None


def parse_ranking_output(raw: Any) -> RankingResult:
    """
    Turn the backend's JSON value into a RankingResult

    - None -> empty
    - list of conforming objects -> list
    - single conforming object -> single
    - anything else -> empty
    """
    if raw is None:
        return RankingResult.empty()

    if isinstance(raw, list):
        items = [_coerce_item(value) for value in raw]
        if any(item is None for item in items):
            logger.warning("Ranking output contained a malformed entry, discarding it: %s", str(raw)[:200])
            return RankingResult.empty()
        return RankingResult.from_items(items)

    if isinstance(raw, dict):
        item = _coerce_item(raw)
        if item is not None:
            logger.warning("Ranking output was a single object, wrapping it in a list")
            return RankingResult.single(item)

    logger.warning("Ranking output had an unexpected shape, returning no responses: %s", str(raw)[:200])
    return RankingResult.empty()


def rank_by_accuracy(items: Sequence[RankedResponseItem]) -> List[RankedResponseItem]:
    """Sort by accuracy, highest first; ties keep their input order"""
    return sorted(items, key=lambda item: item.accuracy, reverse=True)


def select_top_response(items: Sequence[RankedResponseItem]) -> Optional[RankedResponseItem]:
    """Best-scoring item, or None for an empty list"""
    ranked = rank_by_accuracy(items)
    return ranked[0] if ranked else None


class RankingService:
    """Service for persona simulation and ranking"""

    def __init__(self,
                 backend: GeminiBackend,
                 personas: Sequence[PersonaSpec] = DEFAULT_PERSONAS,
                 prompt_engineer: Optional[PromptEngineer] = None):
        self.backend = backend
        self.personas = tuple(personas)
        self.prompt_engineer = prompt_engineer or default_prompt_engineer

    async def rank_responses(self,
                             user_text: str,
                             history_context: str,
                             image_data_uri: Optional[str] = None,
                             input_language: Optional[str] = None,
                             personas: Optional[Sequence[PersonaSpec]] = None,
                             request_id: Optional[str] = None,
                             request: Optional[Any] = None) -> List[RankedResponseItem]:
        """
        Simulate and score one response per persona

        Args:
            user_text: The user's current query
            history_context: Output of summarize_history
            image_data_uri: Optional image attached to the query
            input_language: Optional language hint (e.g. "hi-IN")
            personas: Personas to simulate; defaults to the configured table
            request_id: Optional request ID for logging consistency
            request: Optional FastAPI request object for timing

        Returns:
            Ranked items in the order the backend produced them; empty when the
            backend gave nothing usable

        Raises:
            DataUriError: if the image is not a valid image data URI
        """
        personas = tuple(personas) if personas else self.personas

        media = []
        if image_data_uri:
            media.append(require_mime_prefix(parse_data_uri(image_data_uri), "image/"))

        prompt = self.prompt_engineer.build_ranking_prompt(
            user_text=user_text,
            history_context=history_context,
            personas=personas,
            input_language=input_language,
            has_image=bool(media),
        )

        debug_logger.log_rank(
            request_id,
            f"Calling {self.backend.model} for {len(personas)} personas, image attached: {bool(media)}",
            request
        )
        raw = await self.backend.generate_json(prompt, media)
        result = parse_ranking_output(raw)
        debug_logger.log_rank(request_id, f"Ranking call returned kind={result.kind} items={len(result.items)}", request)

        if result.items and len(result.items) != len(personas):
            logger.warning(
                "Ranking call returned %d responses for %d personas",
                len(result.items),
                len(personas),
            )

        return list(result.items)
