"""Qualitative match insights (strengths, weaknesses, opportunities).

Insights are an optional narrative layer produced by an external text
completion. They are attached to an already computed score and never change
any numeric value.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .match_score import MatchScore
    from .profiles import CompanyProfile, Opportunity

INSIGHTS_SYSTEM_PROMPT = (
    "You are a government contracting capture analyst. You explain how well a "
    "company fits a federal, state, or local opportunity. Respond only with JSON."
)


@dataclass(frozen=True)
class CategoryInsights:
    strengths: tuple[str, ...] = ()
    weaknesses: tuple[str, ...] = ()
    opportunities: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.strengths or self.weaknesses or self.opportunities)


@dataclass(frozen=True)
class MatchInsights:
    """Per-category insights, one entry for each scoring category."""

    past_performance: CategoryInsights = CategoryInsights()
    technical_capability: CategoryInsights = CategoryInsights()
    strategic_fit: CategoryInsights = CategoryInsights()
    credibility: CategoryInsights = CategoryInsights()

    @property
    def is_empty(self) -> bool:
        return all(
            category.is_empty
            for category in (
                self.past_performance,
                self.technical_capability,
                self.strategic_fit,
                self.credibility,
            )
        )


def build_insights_prompt(
    profile: CompanyProfile, opportunity: Opportunity, match_score: MatchScore
) -> str:
    """Render a deterministic prompt describing the match and its computed sub-scores."""
    lines = [
        f"Company: {profile.company_name or profile.profile_id}",
        f"NAICS: {', '.join(profile.naics_codes) or 'not provided'}",
        f"Core competencies: {', '.join(profile.core_competencies) or 'not provided'}",
        f"Agency experience: {', '.join(profile.agency_experience) or 'not provided'}",
        "",
        f"Opportunity: {opportunity.title or opportunity.opportunity_id}",
        f"Agency: {opportunity.agency or 'unknown'}",
        f"NAICS: {', '.join(opportunity.naics_codes) or 'not provided'}",
        f"Set-aside: {opportunity.set_aside_code or 'none'}",
        "",
        f"Overall score: {match_score.overall_score}/100 "
        f"(confidence {match_score.confidence:.2f})",
    ]
    for name, factor in match_score.detailed_factors.items():
        lines.append(f"- {name}: {factor.score:.1f} (weight {factor.weight})")
        lines.extend(
            f"    {sub.name}: {sub.score:.0f} - {sub.details}" for sub in factor.sub_factors
        )
    lines.extend(
        [
            "",
            "For each category (pastPerformance, technicalCapability, strategicFit, credibility) "
            "return up to three strengths, weaknesses, and opportunities as a JSON object "
            'shaped like {"pastPerformance": {"strengths": [], "weaknesses": [], '
            '"opportunities": []}, ...}.',
        ]
    )
    return "\n".join(lines)


def attach_insights(match_score: MatchScore, insights: MatchInsights) -> MatchScore:
    """Return a copy of ``match_score`` carrying ``insights`` on each category."""
    factors = match_score.detailed_factors
    return replace(
        match_score,
        insights=insights,
        detailed_factors=replace(
            factors,
            past_performance=replace(factors.past_performance, insights=insights.past_performance),
            technical_capability=replace(
                factors.technical_capability, insights=insights.technical_capability
            ),
            strategic_fit=replace(factors.strategic_fit, insights=insights.strategic_fit),
            credibility=replace(factors.credibility, insights=insights.credibility),
        ),
    )
