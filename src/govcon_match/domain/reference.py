"""Immutable bundle of the static reference data the calculator reads."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from types import MappingProxyType

from .scoring_policy import ScoringPolicy
from .set_asides import SetAsideCatalog


def _empty_defaults() -> MappingProxyType[str, tuple[str, ...]]:
    return MappingProxyType({})


@dataclass(frozen=True)
class ReferenceData:
    """Set-aside catalog, NAICS-to-PSC defaults, and scoring policy.

    Loaded once at startup and shared by reference across requests.
    """

    set_asides: SetAsideCatalog
    policy: ScoringPolicy = field(default_factory=ScoringPolicy)
    naics_psc_defaults: MappingProxyType[str, tuple[str, ...]] = field(
        default_factory=_empty_defaults
    )

    def psc_defaults_for(self, naics_codes: Iterable[str]) -> tuple[str, ...]:
        """Return default PSC codes for NAICS codes using the longest matching prefix."""
        derived: list[str] = []
        for code in naics_codes:
            text = code.strip()
            for length in range(len(text), 1, -1):
                mapped = self.naics_psc_defaults.get(text[:length])
                if mapped is not None:
                    derived.extend(psc for psc in mapped if psc not in derived)
                    break
        return tuple(derived)
