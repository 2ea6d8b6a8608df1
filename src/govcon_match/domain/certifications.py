"""Domain model for company certifications (8(a), HUBZone, WOSB, ...).

A certification only counts towards set-aside eligibility while it is
effective: active, activated by the user, and not past its expiration date.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal

CertificationStatus = Literal["active", "pending", "expired", "suspended", "revoked"]
VerificationStatus = Literal["pending", "verified", "rejected", "not_required"]


@dataclass(frozen=True)
class UserCertification:
    """A certification held (or applied for) by a company."""

    certification_id: str
    name: str = ""
    obtained_date: date | None = None
    expiration_date: date | None = None
    status: CertificationStatus = "active"
    verification_status: VerificationStatus = "not_required"
    is_activated: bool = True

    @property
    def normalized_id(self) -> str:
        return self.certification_id.strip().lower()

    def is_effective(self, today: date) -> bool:
        """Return True when the certification counts for eligibility on ``today``."""
        if self.status != "active" or not self.is_activated:
            return False
        return self.expiration_date is None or self.expiration_date > today


def effective_certification_ids(
    certifications: Iterable[UserCertification], *, today: date
) -> frozenset[str]:
    """Return lowercased ids of certifications that are effective on ``today``."""
    return frozenset(
        cert.normalized_id
        for cert in certifications
        if cert.normalized_id and cert.is_effective(today)
    )


def expiring_certifications(
    certifications: Iterable[UserCertification],
    *,
    today: date,
    within_days: int = 90,
) -> tuple[UserCertification, ...]:
    """Return effective certifications that expire within ``within_days`` of ``today``."""
    horizon = today + timedelta(days=within_days)
    expiring = [
        cert
        for cert in certifications
        if cert.is_effective(today)
        and cert.expiration_date is not None
        and cert.expiration_date <= horizon
    ]
    return tuple(
        sorted(expiring, key=lambda cert: (cert.expiration_date or horizon, cert.normalized_id))
    )
