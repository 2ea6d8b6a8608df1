"""Best-effort AI insights for a computed match score.

The completion call runs on a worker thread bounded by a timeout. Any failure
(timeout, transport error, unusable response) is logged and reported as
``None`` so the numeric score is always returned on its own.

Usage example:
    insights = explain_match(client, profile, opportunity, score, timeout_seconds=20)
    if insights is not None:
        score = service.attach_insights(score, insights)
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..domain.insights import (
    INSIGHTS_SYSTEM_PROMPT,
    CategoryInsights,
    MatchInsights,
    build_insights_prompt,
)
from ..domain.match_score import MatchScore
from ..domain.profiles import CompanyProfile, Opportunity
from ..exceptions import CompletionServiceError, InsightsParseError
from ..infrastructure.io.validation import format_validation_error
from ..observability import get_logger
from ..protocols import CompletionClient

logger = get_logger("govcon_match.application.explain")

_MAX_ITEMS_PER_LIST = 5
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class _CategoryInsightsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    strengths: tuple[str, ...] = ()
    weaknesses: tuple[str, ...] = ()
    opportunities: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _unwrap_insights(cls, data: object) -> object:
        if isinstance(data, dict) and isinstance(data.get("insights"), dict):
            return data["insights"]
        return data

    @field_validator("strengths", "weaknesses", "opportunities")
    @classmethod
    def _clean_items(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(item.strip() for item in value if item.strip())[:_MAX_ITEMS_PER_LIST]


class _MatchInsightsModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore", frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    past_performance: _CategoryInsightsModel = _CategoryInsightsModel()
    technical_capability: _CategoryInsightsModel = _CategoryInsightsModel()
    strategic_fit: _CategoryInsightsModel = _CategoryInsightsModel()
    credibility: _CategoryInsightsModel = _CategoryInsightsModel()

    @model_validator(mode="before")
    @classmethod
    def _unwrap_categories(cls, data: object) -> object:
        if isinstance(data, dict) and isinstance(data.get("categories"), dict):
            return data["categories"]
        return data


def _to_domain_category(model: _CategoryInsightsModel) -> CategoryInsights:
    return CategoryInsights(
        strengths=model.strengths,
        weaknesses=model.weaknesses,
        opportunities=model.opportunities,
    )


def _extract_json_object(text: str) -> str:
    candidate = text.strip()
    fenced = _FENCED_BLOCK.search(candidate)
    if fenced is not None:
        candidate = fenced.group(1).strip()
    found = _JSON_OBJECT.search(candidate)
    if found is None:
        raise InsightsParseError("no JSON object in completion text")
    return found.group(0)


def parse_insights(text: str) -> MatchInsights:
    """Parse completion text (raw, fenced, or embedded JSON) into match insights."""
    try:
        model = _MatchInsightsModel.model_validate_json(_extract_json_object(text))
    except ValidationError as exc:
        raise InsightsParseError(format_validation_error(exc)) from exc
    insights = MatchInsights(
        past_performance=_to_domain_category(model.past_performance),
        technical_capability=_to_domain_category(model.technical_capability),
        strategic_fit=_to_domain_category(model.strategic_fit),
        credibility=_to_domain_category(model.credibility),
    )
    if insights.is_empty:
        raise InsightsParseError("completion contained no insights")
    return insights


def explain_match(
    client: CompletionClient,
    profile: CompanyProfile,
    opportunity: Opportunity,
    match_score: MatchScore,
    *,
    timeout_seconds: float,
) -> MatchInsights | None:
    """Request qualitative insights for ``match_score``; return None on any failure."""
    prompt = build_insights_prompt(profile, opportunity, match_score)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="match-insights")
    try:
        future = executor.submit(
            client.complete,
            prompt,
            system_prompt=INSIGHTS_SYSTEM_PROMPT,
            timeout_seconds=timeout_seconds,
        )
        text = future.result(timeout=timeout_seconds)
        return parse_insights(text)
    except FutureTimeoutError:
        logger.warning(
            "Insights for %s timed out after %ss", match_score.match_score_id, timeout_seconds
        )
    except CompletionServiceError as exc:
        logger.warning("Insights for %s unavailable: %s", match_score.match_score_id, exc)
    except InsightsParseError as exc:
        logger.warning("Insights for %s discarded: %s", match_score.match_score_id, exc)
    except Exception as exc:
        logger.warning(
            "Insights for %s failed: %s: %s",
            match_score.match_score_id,
            type(exc).__name__,
            exc,
        )
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return None
