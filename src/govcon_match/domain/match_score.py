"""Rule-based match scoring between a company profile and an opportunity.

The composite score is a weighted sum of four categories:

- Past Performance (35): agency overlap and contract history.
- Technical Capability (35): NAICS alignment, certifications, competencies.
- Strategic Fit & Relationships (15): geography, set-aside eligibility,
  government level.
- Credibility & Market Presence (15): registration, size, web presence,
  contact completeness.

Each category is a weighted mean of sub-factors. A sub-factor whose inputs
are missing contributes the policy's neutral score and counts as unresolved;
category confidence is the share of resolved sub-factors and overall
confidence is the mean over categories. Scoring is pure: the same inputs and
``today`` always produce the same result.

Usage example:
    from datetime import date

    from govcon_match.domain.match_score import calculate_match_score

    score = calculate_match_score(profile, opportunity, reference=reference, today=date.today())
    print(score.overall_score, score.confidence)
"""

from __future__ import annotations

import hashlib
import json
import math
import re
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import date
from statistics import fmean

from .certifications import effective_certification_ids
from .insights import CategoryInsights, MatchInsights
from .outcomes import Outcome
from .profiles import CLEARANCE_ORDER, CompanyProfile, GovernmentLevel, Opportunity
from .reference import ReferenceData
from .scoring_policy import CategoryName, ScoringPolicy
from .set_asides import EligibilityResult, format_set_aside, resolve_eligibility

SCORING_METHOD = "rules"

_TOKEN_RE = re.compile(r"[a-z0-9]+")
_WEBSITE_RE = re.compile(r"^(https?://)?[a-z0-9-]+(\.[a-z0-9-]+)+(/\S*)?$")

_GOVERNMENT_LEVEL_COMPATIBILITY: dict[GovernmentLevel, dict[GovernmentLevel, int]] = {
    "federal": {"federal": 100, "state": 60, "local": 40},
    "state": {"federal": 60, "state": 100, "local": 80},
    "local": {"federal": 30, "state": 80, "local": 100},
}
_LOCAL_AGENCY_KEYWORDS = (
    "county",
    "city of",
    "municipal",
    "town of",
    "township",
    "village of",
    "borough",
    "school district",
    "parish",
)
_STATE_AGENCY_KEYWORDS = (
    "state of",
    "commonwealth of",
    "state department of",
    "state university",
    "state agency",
)
_REGISTRATION_BASE_SCORES = {"active": 70, "pending": 40, "expired": 20}


@dataclass(frozen=True)
class SubFactorScore:
    """One scored signal inside a category."""

    name: str
    score: float
    weight: int
    resolved: bool
    details: str

    @property
    def weighted(self) -> float:
        return self.score * self.weight / 100


@dataclass(frozen=True)
class FactorScore:
    """A category score with its sub-factor breakdown."""

    score: float
    weight: int
    confidence: float
    details: tuple[str, ...]
    sub_factors: tuple[SubFactorScore, ...]
    insights: CategoryInsights | None = None

    @property
    def contribution(self) -> float:
        return self.score * self.weight / 100

    def sub_factor(self, name: str) -> SubFactorScore:
        for sub in self.sub_factors:
            if sub.name == name:
                return sub
        raise KeyError(name)


@dataclass(frozen=True)
class DetailedFactors:
    past_performance: FactorScore
    technical_capability: FactorScore
    strategic_fit: FactorScore
    credibility: FactorScore

    def items(self) -> tuple[tuple[CategoryName, FactorScore], ...]:
        return (
            ("past_performance", self.past_performance),
            ("technical_capability", self.technical_capability),
            ("strategic_fit", self.strategic_fit),
            ("credibility", self.credibility),
        )


@dataclass(frozen=True)
class MatchScore:
    """Composite fit between one profile and one opportunity."""

    match_score_id: str
    profile_id: str
    opportunity_id: str
    overall_score: int
    confidence: float
    detailed_factors: DetailedFactors
    eligibility: EligibilityResult
    algorithm_version: str
    scoring_method: str = SCORING_METHOD
    recommendations: tuple[str, ...] = ()
    input_fingerprint: str = ""
    insights: MatchInsights | None = None
    actual_outcome: Outcome | None = None


def match_score_id_for(profile_id: str, opportunity_id: str) -> str:
    return f"match_{opportunity_id}_{profile_id}"


def _recency_band(latest_end: date, today: date) -> tuple[int, str]:
    years = (today - latest_end).days / 365.25
    if years <= 3:
        return 100, "Recent work"
    if years <= 5:
        return 70, "Within 5 years"
    return 40, "Dated experience"


def _dated_state(profile: CompanyProfile | None, today: date) -> dict[str, object] | None:
    if profile is None:
        return None
    end_dates = [
        record.end_date for record in profile.past_performance if record.end_date is not None
    ]
    certification_ids = effective_certification_ids(profile.certifications, today=today)
    return {
        "certifications": sorted(certification_ids),
        "recency": _recency_band(max(end_dates), today)[0] if end_dates else None,
    }


def input_fingerprint(
    profile: CompanyProfile | None, opportunity: Opportunity, *, today: date
) -> str:
    """Return a stable digest of the scoring inputs, used to detect changes.

    ``today`` enters only through the state it moves: which certifications are
    effective and which recency band the latest past work falls in.
    """
    payload = {
        "profile": asdict(profile) if profile is not None else None,
        "opportunity": asdict(opportunity),
        "as_of": _dated_state(profile, today),
    }
    canonical = json.dumps(payload, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _norm(value: str) -> str:
    return " ".join(value.strip().lower().split())


def _codes(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(code.strip() for code in values if code.strip())


def _tokens(text: str) -> frozenset[str]:
    return frozenset(_TOKEN_RE.findall(text.lower()))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _category(weight: int, sub_factors: list[SubFactorScore]) -> FactorScore:
    score = round(sum(sub.weighted for sub in sub_factors), 2)
    resolved = sum(1 for sub in sub_factors if sub.resolved)
    ranked = sorted(sub_factors, key=lambda sub: sub.weighted, reverse=True)
    return FactorScore(
        score=min(100.0, max(0.0, score)),
        weight=weight,
        confidence=round(resolved / len(sub_factors), 3),
        details=tuple(f"{sub.name}: {sub.details} ({sub.score:g})" for sub in ranked),
        sub_factors=tuple(sub_factors),
    )


def naics_match_score(
    profile_codes: Iterable[str], opportunity_codes: Iterable[str]
) -> tuple[int, str]:
    """Return the best NAICS alignment score and its reason.

    Exact on the primary (first) code scores 100, exact on another code 85,
    same 4-digit industry group 60, same 2-digit sector 40, otherwise 0.
    """
    targets = _codes(opportunity_codes)
    best = (0, "No NAICS overlap")
    for index, code in enumerate(_codes(profile_codes)):
        for target in targets:
            if code == target:
                candidate = (
                    (100, f"Primary NAICS {code} matches")
                    if index == 0
                    else (85, f"Secondary NAICS {code} matches")
                )
            elif len(code) >= 4 and code[:4] == target[:4]:
                candidate = (60, f"Same industry group {code[:4]}")
            elif len(code) >= 2 and code[:2] == target[:2]:
                candidate = (40, f"Same sector {code[:2]}")
            else:
                continue
            if candidate[0] > best[0]:
                best = candidate
    return best


def psc_match_score(
    profile_codes: Iterable[str], opportunity_codes: Iterable[str]
) -> tuple[int, str]:
    """Return the best PSC alignment: exact 100, same 2-character category 60."""
    targets = [code.upper() for code in _codes(opportunity_codes)]
    best = (0, "No PSC overlap")
    for code in (code.upper() for code in _codes(profile_codes)):
        for target in targets:
            if code == target:
                return (100, f"PSC {code} matches")
            if code[:2] == target[:2] and best[0] < 60:
                best = (60, f"Same PSC category {code[:2]}")
    return best


def infer_government_level(agency: str) -> GovernmentLevel:
    """Infer the government level from agency naming conventions (default federal)."""
    name = _norm(agency)
    if any(keyword in name for keyword in _LOCAL_AGENCY_KEYWORDS):
        return "local"
    if any(keyword in name for keyword in _STATE_AGENCY_KEYWORDS):
        return "state"
    return "federal"


def _score_past_performance(
    profile: CompanyProfile, opportunity: Opportunity, policy: ScoringPolicy, today: date
) -> FactorScore:
    weights = policy.past_performance
    neutral = policy.neutral_score
    agency = _norm(opportunity.agency)
    records = profile.past_performance
    history = {_norm(name) for name in profile.agency_experience}
    history.update(_norm(record.agency) for record in records)
    history.discard("")

    if not agency or not history:
        agency_sub = SubFactorScore(
            "agency_experience", neutral, weights.agency_experience, False, "No agency to compare"
        )
    elif agency in history:
        agency_sub = SubFactorScore(
            "agency_experience",
            100,
            weights.agency_experience,
            True,
            f"Prior work with {opportunity.agency.strip()}",
        )
    else:
        agency_sub = SubFactorScore(
            "agency_experience",
            60,
            weights.agency_experience,
            True,
            "Experience with other agencies",
        )

    if not records:
        history_sub = SubFactorScore(
            "contract_history", neutral, weights.contract_history, False, "No contract records"
        )
    else:
        industry_groups = {code[:4] for code in _codes(opportunity.naics_codes) if len(code) >= 4}
        relevant = [
            record
            for record in records
            if (agency and _norm(record.agency) == agency)
            or record.naics_code.strip()[:4] in industry_groups
        ]
        if any(record.rating == "excellent" for record in relevant):
            history_sub = SubFactorScore(
                "contract_history",
                100,
                weights.contract_history,
                True,
                "Excellent rating on relevant work",
            )
        elif relevant:
            history_sub = SubFactorScore(
                "contract_history",
                85,
                weights.contract_history,
                True,
                f"{len(relevant)} relevant contract(s)",
            )
        else:
            history_sub = SubFactorScore(
                "contract_history",
                65,
                weights.contract_history,
                True,
                "No directly relevant contracts",
            )

    values = [record.value for record in records if record.value is not None and record.value > 0]
    estimated = opportunity.estimated_value
    if not values or estimated is None or estimated <= 0:
        value_sub = SubFactorScore(
            "value_alignment", neutral, weights.value_alignment, False, "Contract values unknown"
        )
    else:
        ratio = max(values) / estimated
        if ratio >= 0.5:
            value_sub = SubFactorScore(
                "value_alignment", 100, weights.value_alignment, True, "Comparable contract size"
            )
        elif ratio >= 0.25:
            value_sub = SubFactorScore(
                "value_alignment", 70, weights.value_alignment, True, "Smaller prior contracts"
            )
        else:
            value_sub = SubFactorScore(
                "value_alignment", 40, weights.value_alignment, True, "May exceed capacity"
            )

    end_dates = [record.end_date for record in records if record.end_date is not None]
    if not end_dates:
        recency_sub = SubFactorScore("recency", neutral, weights.recency, False, "No end dates")
    else:
        score, reason = _recency_band(max(end_dates), today)
        recency_sub = SubFactorScore("recency", score, weights.recency, True, reason)

    return _category(
        policy.category_weights.past_performance,
        [agency_sub, history_sub, value_sub, recency_sub],
    )


def _score_technical_capability(
    profile: CompanyProfile,
    opportunity: Opportunity,
    reference: ReferenceData,
    certification_ids: frozenset[str],
) -> FactorScore:
    policy = reference.policy
    weights = policy.technical_capability
    neutral = policy.neutral_score

    profile_naics = _codes(profile.naics_codes)
    opportunity_naics = _codes(opportunity.naics_codes)
    profile_psc = _codes(profile.psc_codes) or reference.psc_defaults_for(profile_naics)
    if profile_naics and opportunity_naics:
        score, reason = naics_match_score(profile_naics, opportunity_naics)
        naics_sub = SubFactorScore("naics_alignment", score, weights.naics_alignment, True, reason)
    elif profile_psc and _codes(opportunity.psc_codes):
        score, reason = psc_match_score(profile_psc, opportunity.psc_codes)
        naics_sub = SubFactorScore(
            "naics_alignment", score, weights.naics_alignment, False, f"{reason} (NAICS missing)"
        )
    else:
        naics_sub = SubFactorScore(
            "naics_alignment", neutral, weights.naics_alignment, False, "No codes to compare"
        )

    required = {
        cert.strip().lower() for cert in opportunity.required_certifications if cert.strip()
    }
    if not required:
        cert_sub = SubFactorScore(
            "certification_match",
            100,
            weights.certification_match,
            True,
            "No specific certifications required",
        )
    else:
        held = required & certification_ids
        cert_sub = SubFactorScore(
            "certification_match",
            round(100 * len(held) / len(required), 2),
            weights.certification_match,
            bool(profile.certifications),
            f"Holds {len(held)} of {len(required)} required certifications",
        )

    opportunity_tokens = _tokens(
        " ".join((opportunity.title, opportunity.description, *opportunity.keywords))
    )
    competencies = [tokens for tokens in map(_tokens, profile.core_competencies) if tokens]
    if not competencies or not opportunity_tokens:
        competency_sub = SubFactorScore(
            "competency_alignment",
            neutral,
            weights.competency_alignment,
            False,
            "Competencies or requirements not described",
        )
    else:
        matched = sum(1 for tokens in competencies if tokens <= opportunity_tokens)
        competency_sub = SubFactorScore(
            "competency_alignment",
            round(100 * min(1.0, matched / min(3, len(competencies))), 2),
            weights.competency_alignment,
            True,
            f"{matched} competencies reflected in the requirement",
        )

    required_level = opportunity.security_clearance_required
    held_level = profile.security_clearance
    if required_level is None or required_level == "none":
        clearance_sub = SubFactorScore(
            "security_clearance", 100, weights.security_clearance, True, "No clearance required"
        )
    elif held_level is None:
        clearance_sub = SubFactorScore(
            "security_clearance",
            neutral,
            weights.security_clearance,
            False,
            f"Requires {required_level}; clearance unknown",
        )
    elif CLEARANCE_ORDER.index(held_level) >= CLEARANCE_ORDER.index(required_level):
        clearance_sub = SubFactorScore(
            "security_clearance", 100, weights.security_clearance, True, f"Holds {held_level}"
        )
    else:
        clearance_sub = SubFactorScore(
            "security_clearance",
            20,
            weights.security_clearance,
            True,
            f"Requires {required_level}; holds {held_level}",
        )

    return _category(
        policy.category_weights.technical_capability,
        [naics_sub, cert_sub, competency_sub, clearance_sub],
    )


def _score_geography(
    profile: CompanyProfile, opportunity: Opportunity, weight: int, neutral: int
) -> SubFactorScore:
    place = opportunity.place_of_performance
    location = profile.location
    if location is not None and not location.is_known:
        location = None
    service_states = {state.strip().upper() for state in profile.service_area_states}
    preferences = profile.geographic_preferences
    if place is None or not place.is_known:
        return SubFactorScore(
            "geographic_alignment", neutral, weight, False, "Place of performance unknown"
        )
    if location is None and not service_states and not preferences and not profile.work_from_home:
        return SubFactorScore(
            "geographic_alignment", neutral, weight, False, "Company location unknown"
        )

    state = place.state.strip().upper()
    city = _norm(place.city)

    def _matches(preference_type: str) -> bool:
        return any(
            preference.preference == preference_type
            and (
                state in {item.strip().upper() for item in preference.states}
                or (city and city in {_norm(item) for item in preference.cities})
            )
            for preference in preferences
        )

    if _matches("avoid"):
        return SubFactorScore("geographic_alignment", 0, weight, True, "Area marked as avoided")
    if _matches("preferred"):
        return SubFactorScore("geographic_alignment", 100, weight, True, "Preferred area")
    same_state = location is not None and location.state.strip().upper() == state
    if same_state and location is not None and city and _norm(location.city) == city:
        return SubFactorScore("geographic_alignment", 100, weight, True, "Same city")
    if same_state or state in service_states:
        return SubFactorScore("geographic_alignment", 75, weight, True, "Within service area")
    if _matches("willing"):
        return SubFactorScore("geographic_alignment", 75, weight, True, "Willing to work here")
    if profile.work_from_home:
        return SubFactorScore("geographic_alignment", 60, weight, True, "Remote delivery possible")
    return SubFactorScore("geographic_alignment", 25, weight, True, "Outside service area")


def _score_strategic_fit(
    profile: CompanyProfile,
    opportunity: Opportunity,
    reference: ReferenceData,
    eligibility: EligibilityResult,
) -> FactorScore:
    policy = reference.policy
    weights = policy.strategic_fit
    neutral = policy.neutral_score

    geography_sub = _score_geography(profile, opportunity, weights.geographic_alignment, neutral)

    restricted = reference.set_asides.by_code(opportunity.set_aside_code) is not None
    if not restricted:
        eligibility_reason = "Open competition"
    elif eligibility.match_type == "exact":
        eligibility_reason = f"Eligible for {eligibility.set_aside_code}"
    elif eligibility.match_type == "partial":
        eligibility_reason = f"Qualifies for {eligibility.set_aside_code} via specialised program"
    else:
        eligibility_reason = f"Not eligible for {eligibility.set_aside_code}"
    set_aside_sub = SubFactorScore(
        "set_aside_eligibility",
        eligibility.score,
        weights.set_aside_eligibility,
        not restricted or bool(profile.certifications),
        eligibility_reason,
    )

    level = opportunity.government_level or infer_government_level(opportunity.agency)
    if not profile.government_levels:
        level_sub = SubFactorScore(
            "government_level", neutral, weights.government_level, False, "No level preference"
        )
    elif level in profile.government_levels:
        level_sub = SubFactorScore(
            "government_level", 100, weights.government_level, True, f"Prefers {level} work"
        )
    else:
        best = max(
            _GOVERNMENT_LEVEL_COMPATIBILITY[preferred][level]
            for preferred in profile.government_levels
        )
        level_sub = SubFactorScore(
            "government_level", best, weights.government_level, True, f"{level} work not preferred"
        )

    return _category(
        policy.category_weights.strategic_fit, [geography_sub, set_aside_sub, level_sub]
    )


def _score_credibility(
    profile: CompanyProfile, opportunity: Opportunity, reference: ReferenceData
) -> FactorScore:
    policy = reference.policy
    weights = policy.credibility
    neutral = policy.neutral_score

    status = profile.sam_registration_status
    has_uei = bool(profile.uei.strip())
    has_cage = bool(profile.cage_code.strip())
    if status is None and not has_uei and not has_cage:
        registration_sub = SubFactorScore(
            "registration", neutral, weights.registration, False, "No SAM registration data"
        )
    else:
        base = _REGISTRATION_BASE_SCORES.get(status or "", 0)
        registration_sub = SubFactorScore(
            "registration",
            min(100, base + 15 * has_uei + 15 * has_cage),
            weights.registration,
            True,
            f"SAM {status or 'status unknown'}, UEI {'on file' if has_uei else 'missing'}, "
            f"CAGE {'on file' if has_cage else 'missing'}",
        )

    size = profile.business_size
    restricted = reference.set_asides.by_code(opportunity.set_aside_code) is not None
    if size is None:
        size_sub = SubFactorScore(
            "business_size", neutral, weights.business_size, False, "Business size not declared"
        )
    elif restricted:
        size_sub = SubFactorScore(
            "business_size",
            100 if size == "small" else 0,
            weights.business_size,
            True,
            "Small business" if size == "small" else "Not small for this set-aside",
        )
    else:
        size_sub = SubFactorScore(
            "business_size", 80, weights.business_size, True, f"Declared {size}"
        )

    website = profile.website.strip().lower()
    if not website:
        web_sub = SubFactorScore(
            "web_presence", neutral, weights.web_presence, False, "No website listed"
        )
    elif _WEBSITE_RE.match(website):
        web_sub = SubFactorScore("web_presence", 100, weights.web_presence, True, "Website listed")
    else:
        web_sub = SubFactorScore(
            "web_presence", 40, weights.web_presence, True, "Website does not look valid"
        )

    contacts = [profile.contact_name, profile.contact_email, profile.contact_phone]
    present = sum(1 for value in contacts if value.strip())
    if present == 0:
        contact_sub = SubFactorScore(
            "contact_completeness", neutral, weights.contact_completeness, False, "No contacts"
        )
    else:
        contact_sub = SubFactorScore(
            "contact_completeness",
            round(100 * present / len(contacts), 2),
            weights.contact_completeness,
            True,
            f"{present} of {len(contacts)} contact fields",
        )

    return _category(
        policy.category_weights.credibility,
        [registration_sub, size_sub, web_sub, contact_sub],
    )


def _neutral_factor(category: CategoryName, policy: ScoringPolicy) -> FactorScore:
    sub_factors = [
        SubFactorScore(name, policy.neutral_score, weight, False, "Profile data unavailable")
        for name, weight in policy.sub_weights(category).items()
    ]
    return _category(policy.category_weights.weight_of(category), sub_factors)


def generate_recommendations(
    factors: DetailedFactors,
    opportunity: Opportunity,
    eligibility: EligibilityResult,
    *,
    overall_score: int,
    confidence: float,
    reference: ReferenceData,
) -> tuple[str, ...]:
    """Return deterministic, actionable advice derived from the score breakdown."""
    advice: list[str] = []
    if not eligibility.is_match:
        advice.append(
            f"This opportunity is reserved for "
            f"{format_set_aside(eligibility.set_aside_code, reference.set_asides)}; "
            "consider teaming with an eligible firm."
        )
    elif eligibility.match_type == "partial":
        advice.append(
            f"You qualify for {eligibility.set_aside_code} through a specialised program; "
            "confirm your small business size standard."
        )
    naics = factors.technical_capability.sub_factor("naics_alignment")
    if naics.resolved and naics.score < 60 and opportunity.naics_codes:
        advice.append(
            f"Add NAICS {opportunity.naics_codes[0]} to your profile if it reflects your work."
        )
    clearance = factors.technical_capability.sub_factor("security_clearance")
    if clearance.resolved and clearance.score < 50:
        advice.append(
            f"This work requires {opportunity.security_clearance_required} clearance."
        )
    if factors.past_performance.score < 60:
        target = opportunity.agency.strip() or "this agency"
        advice.append(f"Build past performance with {target} through subcontracting or teaming.")
    if factors.credibility.score < 60:
        advice.append(
            "Complete SAM registration details (UEI, CAGE) and contact information."
        )
    if confidence < 0.5:
        advice.append("Complete more of your profile to improve score confidence.")
    if overall_score >= 80:
        advice.append("Strong match: prioritise a bid decision.")
    return tuple(advice)


def calculate_match_score(
    profile: CompanyProfile | None,
    opportunity: Opportunity,
    *,
    reference: ReferenceData,
    today: date,
) -> MatchScore:
    """Score how well ``profile`` fits ``opportunity``.

    A missing or empty profile yields the neutral baseline with zero confidence.
    """
    policy = reference.policy
    profile_id = profile.profile_id if profile is not None else ""
    fingerprint = input_fingerprint(profile, opportunity, today=today)

    if profile is None or profile.is_empty():
        eligibility = resolve_eligibility((), opportunity.set_aside_code, reference.set_asides)
        factors = DetailedFactors(
            past_performance=_neutral_factor("past_performance", policy),
            technical_capability=_neutral_factor("technical_capability", policy),
            strategic_fit=_neutral_factor("strategic_fit", policy),
            credibility=_neutral_factor("credibility", policy),
        )
    else:
        certification_ids = effective_certification_ids(profile.certifications, today=today)
        eligibility = resolve_eligibility(
            certification_ids, opportunity.set_aside_code, reference.set_asides
        )
        factors = DetailedFactors(
            past_performance=_score_past_performance(profile, opportunity, policy, today),
            technical_capability=_score_technical_capability(
                profile, opportunity, reference, certification_ids
            ),
            strategic_fit=_score_strategic_fit(profile, opportunity, reference, eligibility),
            credibility=_score_credibility(profile, opportunity, reference),
        )

    raw = sum(factor.contribution for _, factor in factors.items())
    overall = max(0, min(100, _round_half_up(raw)))
    confidence = round(fmean(factor.confidence for _, factor in factors.items()), 3)
    return MatchScore(
        match_score_id=match_score_id_for(profile_id, opportunity.opportunity_id),
        profile_id=profile_id,
        opportunity_id=opportunity.opportunity_id,
        overall_score=overall,
        confidence=confidence,
        detailed_factors=factors,
        eligibility=eligibility,
        algorithm_version=policy.algorithm_version,
        recommendations=generate_recommendations(
            factors,
            opportunity,
            eligibility,
            overall_score=overall,
            confidence=confidence,
            reference=reference,
        ),
        input_fingerprint=fingerprint,
    )


def calculate_batch_match_scores(
    profile: CompanyProfile | None,
    opportunities: Iterable[Opportunity],
    *,
    reference: ReferenceData,
    today: date,
) -> tuple[MatchScore, ...]:
    """Score many opportunities, best first (ties by confidence, then id)."""
    scores = [
        calculate_match_score(profile, opportunity, reference=reference, today=today)
        for opportunity in opportunities
    ]
    return tuple(
        sorted(
            scores,
            key=lambda score: (-score.overall_score, -score.confidence, score.opportunity_id),
        )
    )
