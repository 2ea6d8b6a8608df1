"""Set-aside catalog and eligibility resolution.

An opportunity reserved under a set-aside program can only be bid on by a
company holding one of the program's qualifying certifications. The resolver
classifies the fit as:

- ``exact``: the user is directly eligible for the code (score 100).
- ``partial``: the code is a general small-business set-aside (SBA/SBP) and the
  user holds a specialised small-business certification (score 75).
- ``none``: either no restriction applies (open competition, score 50) or the
  user is not eligible (score 0).

Usage example:
    from govcon_match.domain.set_asides import resolve_eligibility

    result = resolve_eligibility({"8a"}, "SBA", catalog)
    assert result.match_type == "partial"
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Literal

from .certifications import UserCertification

SetAsideType = Literal["competitive", "sole_source", "partial"]
SET_ASIDE_TYPES: tuple[SetAsideType, ...] = ("competitive", "sole_source", "partial")
EligibilityMatchType = Literal["exact", "partial", "none"]

SMALL_BUSINESS_CERTIFICATION = "sb"
GENERAL_SMALL_BUSINESS_CODES = frozenset({"SBA", "SBP"})
SPECIALIZED_SMALL_BUSINESS_CODES = frozenset(
    {
        "8A",
        "8AN",
        "HZC",
        "HZS",
        "SDVOSBC",
        "SDVOSBS",
        "WOSB",
        "WOSBSS",
        "EDWOSB",
        "EDWOSBSS",
    }
)

EXACT_MATCH_SCORE = 100
PARTIAL_MATCH_SCORE = 75
OPEN_COMPETITION_SCORE = 50
NOT_ELIGIBLE_SCORE = 0

# Sole-source ceilings (USD) used when a definition carries no explicit threshold.
VA_VOSB_SOLE_SOURCE_THRESHOLD = 5_000_000
SOLE_SOURCE_MANUFACTURING_THRESHOLD = 7_000_000
SOLE_SOURCE_OTHER_THRESHOLD = 4_500_000
_VA_SOLE_SOURCE_CODE = "VSS"


@dataclass(frozen=True)
class SetAsideDefinition:
    """A set-aside program from the static reference catalog."""

    code: str
    name: str
    full_name: str
    description: str
    type: SetAsideType
    related_certifications: tuple[str, ...]
    priority: int
    agency_specific: str | None = None
    procurement_threshold: float | None = None

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.code})"


@dataclass(frozen=True)
class SetAsideCatalog:
    """Immutable, code-indexed collection of set-aside definitions."""

    definitions: tuple[SetAsideDefinition, ...]
    _by_code: MappingProxyType[str, SetAsideDefinition] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index = {definition.code: definition for definition in self.definitions}
        object.__setattr__(self, "_by_code", MappingProxyType(index))

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(self._by_code)

    def by_code(self, code: str | None) -> SetAsideDefinition | None:
        if not code:
            return None
        return self._by_code.get(code.strip())

    def by_type(self, set_aside_type: SetAsideType) -> tuple[SetAsideDefinition, ...]:
        return _by_priority(d for d in self.definitions if d.type == set_aside_type)

    def agency_specific(self, agency: str) -> tuple[SetAsideDefinition, ...]:
        """Return programs restricted to ``agency`` (matched case-insensitively)."""
        target = agency.strip().lower()
        return _by_priority(
            d
            for d in self.definitions
            if d.agency_specific is not None and d.agency_specific.lower() == target
        )

    def general(self) -> tuple[SetAsideDefinition, ...]:
        """Return programs available government-wide."""
        return _by_priority(d for d in self.definitions if d.agency_specific is None)


@dataclass(frozen=True)
class EligibilityResult:
    """Outcome of resolving a user's certifications against a set-aside code."""

    is_match: bool
    match_type: EligibilityMatchType
    score: int
    set_aside_code: str = ""


@dataclass(frozen=True)
class SetAsideEligibilityRecord:
    """A set-aside the user qualifies for, with the certifications that qualify them."""

    set_aside_code: str
    qualifying_certifications: tuple[str, ...]
    eligibility_date: date | None
    auto_detected: bool
    notes: str


@dataclass(frozen=True)
class SetAsideShare:
    code: str
    count: int
    percentage: float


@dataclass(frozen=True)
class SetAsideStats:
    """Distribution of set-aside codes across a set of opportunities."""

    total: int
    counts: MappingProxyType[str, int]
    top: tuple[SetAsideShare, ...]


def _by_priority(definitions: Iterable[SetAsideDefinition]) -> tuple[SetAsideDefinition, ...]:
    return tuple(sorted(definitions, key=lambda d: (d.priority, d.code)))


def _normalize_ids(user_certification_ids: Iterable[str]) -> frozenset[str]:
    return frozenset(cert.strip().lower() for cert in user_certification_ids if cert.strip())


def _is_directly_eligible(definition: SetAsideDefinition, cert_ids: frozenset[str]) -> bool:
    if cert_ids.intersection(definition.related_certifications):
        return True
    return (
        definition.code in GENERAL_SMALL_BUSINESS_CODES
        and SMALL_BUSINESS_CERTIFICATION in cert_ids
    )


def directly_eligible_codes(
    user_certification_ids: Iterable[str], catalog: SetAsideCatalog
) -> frozenset[str]:
    """Return catalog codes the certifications qualify for directly."""
    cert_ids = _normalize_ids(user_certification_ids)
    return frozenset(d.code for d in catalog.definitions if _is_directly_eligible(d, cert_ids))


def eligible_set_asides(
    user_certification_ids: Iterable[str], catalog: SetAsideCatalog
) -> tuple[SetAsideDefinition, ...]:
    """Return directly eligible definitions ranked by ascending priority."""
    cert_ids = _normalize_ids(user_certification_ids)
    return _by_priority(d for d in catalog.definitions if _is_directly_eligible(d, cert_ids))


def resolve_eligibility(
    user_certification_ids: Iterable[str],
    opportunity_set_aside_code: str | None,
    catalog: SetAsideCatalog,
) -> EligibilityResult:
    """Classify whether the certifications qualify for the opportunity's set-aside.

    An empty or unknown code means the opportunity is not restricted.
    """
    code = (opportunity_set_aside_code or "").strip()
    if catalog.by_code(code) is None:
        return EligibilityResult(
            is_match=True, match_type="none", score=OPEN_COMPETITION_SCORE, set_aside_code=code
        )

    eligible = directly_eligible_codes(user_certification_ids, catalog)
    if code in eligible:
        return EligibilityResult(
            is_match=True, match_type="exact", score=EXACT_MATCH_SCORE, set_aside_code=code
        )
    if code in GENERAL_SMALL_BUSINESS_CODES and eligible & SPECIALIZED_SMALL_BUSINESS_CODES:
        return EligibilityResult(
            is_match=True, match_type="partial", score=PARTIAL_MATCH_SCORE, set_aside_code=code
        )
    return EligibilityResult(
        is_match=False, match_type="none", score=NOT_ELIGIBLE_SCORE, set_aside_code=code
    )


def sole_source_threshold(
    code: str, catalog: SetAsideCatalog, *, is_manufacturing: bool = False
) -> float | None:
    """Return the sole-source award ceiling for a code, or None if not sole-source."""
    definition = catalog.by_code(code)
    if definition is None or definition.type != "sole_source":
        return None
    if definition.procurement_threshold is not None:
        return definition.procurement_threshold
    if definition.code == _VA_SOLE_SOURCE_CODE:
        return VA_VOSB_SOLE_SOURCE_THRESHOLD
    if is_manufacturing:
        return SOLE_SOURCE_MANUFACTURING_THRESHOLD
    return SOLE_SOURCE_OTHER_THRESHOLD


def format_set_aside(code: str, catalog: SetAsideCatalog) -> str:
    definition = catalog.by_code(code)
    return definition.display_name if definition is not None else code


def user_set_aside_eligibility(
    certifications: Iterable[UserCertification],
    catalog: SetAsideCatalog,
    *,
    today: date,
) -> tuple[SetAsideEligibilityRecord, ...]:
    """Derive the set-asides a user qualifies for from their effective certifications."""
    effective = [cert for cert in certifications if cert.is_effective(today)]
    records: list[SetAsideEligibilityRecord] = []
    for definition in eligible_set_asides((cert.normalized_id for cert in effective), catalog):
        qualifying = [
            cert
            for cert in effective
            if cert.normalized_id in definition.related_certifications
            or (
                cert.normalized_id == SMALL_BUSINESS_CERTIFICATION
                and definition.code in GENERAL_SMALL_BUSINESS_CODES
            )
        ]
        obtained = [cert.obtained_date for cert in qualifying if cert.obtained_date is not None]
        qualifying_ids = tuple(sorted({cert.normalized_id for cert in qualifying}))
        records.append(
            SetAsideEligibilityRecord(
                set_aside_code=definition.code,
                qualifying_certifications=qualifying_ids,
                eligibility_date=min(obtained) if obtained else None,
                auto_detected=True,
                notes=f"Auto-detected from certifications: {', '.join(qualifying_ids)}",
            )
        )
    return tuple(records)


def set_aside_stats(codes: Iterable[str | None], *, top_n: int = 5) -> SetAsideStats:
    """Count set-aside codes (ignoring blanks) and report the most common ones."""
    counter = Counter(code.strip() for code in codes if code and code.strip())
    total = sum(counter.values())
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))[:top_n]
    top = tuple(
        SetAsideShare(code=code, count=count, percentage=round(count / total * 100, 1))
        for code, count in ranked
    )
    return SetAsideStats(total=total, counts=MappingProxyType(dict(counter)), top=top)
