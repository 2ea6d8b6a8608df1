"""Company profile and opportunity records used as scoring inputs.

All collections are tuples so records stay hashable and immutable once parsed.
Every field beyond the identifier is optional; missing data lowers confidence
rather than failing the score.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Literal

from .certifications import UserCertification

GovernmentLevel = Literal["federal", "state", "local"]
PreferenceType = Literal["preferred", "willing", "avoid"]
BusinessSize = Literal["small", "other_than_small"]
RegistrationStatus = Literal["active", "pending", "expired"]
PerformanceRating = Literal["excellent", "very_good", "satisfactory", "marginal", "unsatisfactory"]
ClearanceLevel = Literal[
    "none", "public_trust", "confidential", "secret", "top_secret", "ts_sci"
]

CLEARANCE_ORDER: tuple[ClearanceLevel, ...] = (
    "none",
    "public_trust",
    "confidential",
    "secret",
    "top_secret",
    "ts_sci",
)


@dataclass(frozen=True)
class Location:
    """A postal location; all parts optional."""

    city: str = ""
    state: str = ""
    zip_code: str = ""

    @property
    def is_known(self) -> bool:
        return bool(self.state.strip())


@dataclass(frozen=True)
class GeographicPreference:
    """A declared willingness (or unwillingness) to work in given places."""

    preference: PreferenceType
    states: tuple[str, ...] = ()
    cities: tuple[str, ...] = ()


@dataclass(frozen=True)
class PastPerformanceRecord:
    """One completed or ongoing contract in the company's history."""

    agency: str
    naics_code: str = ""
    value: float | None = None
    end_date: date | None = None
    rating: PerformanceRating | None = None


@dataclass(frozen=True)
class CompanyProfile:
    """A contractor's capabilities, credentials, and preferences."""

    profile_id: str
    company_name: str = ""
    naics_codes: tuple[str, ...] = ()
    psc_codes: tuple[str, ...] = ()
    certifications: tuple[UserCertification, ...] = ()
    core_competencies: tuple[str, ...] = ()
    agency_experience: tuple[str, ...] = ()
    past_performance: tuple[PastPerformanceRecord, ...] = ()
    location: Location | None = None
    service_area_states: tuple[str, ...] = ()
    geographic_preferences: tuple[GeographicPreference, ...] = ()
    work_from_home: bool = False
    government_levels: tuple[GovernmentLevel, ...] = ()
    security_clearance: ClearanceLevel | None = None
    sam_registration_status: RegistrationStatus | None = None
    uei: str = ""
    cage_code: str = ""
    business_size: BusinessSize | None = None
    website: str = ""
    contact_name: str = ""
    contact_email: str = ""
    contact_phone: str = ""

    def is_empty(self) -> bool:
        """Return True when no field that feeds scoring is populated."""
        return not any(
            (
                self.naics_codes,
                self.psc_codes,
                self.certifications,
                self.core_competencies,
                self.agency_experience,
                self.past_performance,
                self.location is not None and self.location.is_known,
                self.service_area_states,
                self.geographic_preferences,
                self.work_from_home,
                self.government_levels,
                self.security_clearance,
                self.sam_registration_status,
                self.uei.strip(),
                self.cage_code.strip(),
                self.business_size,
                self.website.strip(),
                self.contact_name.strip(),
                self.contact_email.strip(),
                self.contact_phone.strip(),
            )
        )


@dataclass(frozen=True)
class Opportunity:
    """A contracting opportunity (solicitation) to be matched against profiles."""

    opportunity_id: str
    title: str = ""
    description: str = ""
    agency: str = ""
    naics_codes: tuple[str, ...] = ()
    psc_codes: tuple[str, ...] = ()
    set_aside_code: str = ""
    estimated_value: float | None = None
    place_of_performance: Location | None = None
    government_level: GovernmentLevel | None = None
    required_certifications: tuple[str, ...] = ()
    security_clearance_required: ClearanceLevel | None = None
    keywords: tuple[str, ...] = ()
