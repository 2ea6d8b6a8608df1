"""Parse inbound profile and opportunity JSON into domain records.

Expected shapes (snake_case keys, dates as ISO strings)::

    profile.json        {"profile_id": "p-1", "naics_codes": ["541511"], ...}
    opportunity.json    {"opportunity_id": "o-1", "agency": "DOD", ...}
    opportunities.json  {"opportunities": [{...}, {...}]}
"""

from __future__ import annotations

from pathlib import Path

from ..domain.profiles import CompanyProfile, Opportunity
from ..infrastructure.io.validation import IncomingDataError, validate_as
from ..protocols import FileSystem


def parse_profile(payload: object) -> CompanyProfile:
    return validate_as(CompanyProfile, payload)


def parse_opportunity(payload: object) -> Opportunity:
    return validate_as(Opportunity, payload)


def _read(path: Path, fs: FileSystem) -> dict[str, object]:
    if not fs.exists(path):
        raise IncomingDataError(f"Input file not found: {path}")
    return fs.read_json(path)


def load_profile(path: Path, fs: FileSystem) -> CompanyProfile:
    return parse_profile(_read(path, fs))


def load_opportunity(path: Path, fs: FileSystem) -> Opportunity:
    return parse_opportunity(_read(path, fs))


def load_opportunities(path: Path, fs: FileSystem) -> tuple[Opportunity, ...]:
    """Load an ``{"opportunities": [...]}`` document; ids must be unique."""
    payload = _read(path, fs)
    opportunities = validate_as(tuple[Opportunity, ...], payload.get("opportunities"))
    ids = [opportunity.opportunity_id for opportunity in opportunities]
    duplicates = sorted({item for item in ids if ids.count(item) > 1})
    if duplicates:
        raise IncomingDataError(f"Duplicate opportunity ids in {path}: {', '.join(duplicates)}")
    return opportunities
