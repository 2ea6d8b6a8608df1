"""Loading and strict validation for static reference data.

Reference data is read once in the composition root and handed to the
scoring service as an immutable ``ReferenceData`` bundle.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from ..config import MatchConfig
from ..domain.reference import ReferenceData
from ..domain.set_asides import SetAsideCatalog, SetAsideDefinition, SetAsideType
from ..exceptions import ReferenceDataFileNotFoundError, ReferenceDataValidationError
from ..infrastructure.io.validation import format_validation_error
from ..observability import get_logger
from ..protocols import FileSystem
from .scoring_policy import load_scoring_policy

_SCHEMA_VERSION = 1
_MAX_PRIORITY = 20

logger = get_logger("govcon_match.application.reference_data")


class _SetAsideModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str
    name: str
    full_name: str
    description: str
    type: SetAsideType
    agency_specific: str | None = None
    related_certifications: tuple[str, ...]
    procurement_threshold: float | None = None
    priority: int

    @field_validator("code", "name", "full_name")
    @classmethod
    def _validate_non_empty(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator("agency_specific")
    @classmethod
    def _validate_agency(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("related_certifications")
    @classmethod
    def _validate_certifications(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if any(not cert.strip() for cert in value):
            raise ValueError
        return tuple(cert.strip().lower() for cert in value)

    @field_validator("procurement_threshold")
    @classmethod
    def _validate_threshold(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError
        return value

    @field_validator("priority")
    @classmethod
    def _validate_priority(cls, value: int) -> int:
        if value < 1 or value > _MAX_PRIORITY:
            raise ValueError
        return value


class _SetAsideCatalogModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    set_asides: tuple[_SetAsideModel, ...]

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value

    @model_validator(mode="after")
    def _validate_codes(self) -> _SetAsideCatalogModel:
        if not self.set_asides:
            raise ValueError
        codes = [item.code for item in self.set_asides]
        if len(set(codes)) != len(codes):
            raise ValueError
        return self


class _NaicsPscDefaultsModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    defaults: dict[str, tuple[str, ...]]

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value

    @field_validator("defaults")
    @classmethod
    def _validate_defaults(cls, value: dict[str, tuple[str, ...]]) -> dict[str, tuple[str, ...]]:
        cleaned: dict[str, tuple[str, ...]] = {}
        for prefix, codes in value.items():
            key = prefix.strip()
            if len(key) < 2 or not key.isdigit():
                raise ValueError
            psc_codes = tuple(code.strip().upper() for code in codes if code.strip())
            if not psc_codes:
                raise ValueError
            cleaned[key] = psc_codes
        return cleaned


def _to_domain_definition(model: _SetAsideModel) -> SetAsideDefinition:
    return SetAsideDefinition(
        code=model.code,
        name=model.name,
        full_name=model.full_name,
        description=model.description.strip(),
        type=model.type,
        related_certifications=model.related_certifications,
        priority=model.priority,
        agency_specific=model.agency_specific,
        procurement_threshold=model.procurement_threshold,
    )


def _read_payload(path: Path, fs: FileSystem) -> str:
    if not fs.exists(path):
        raise ReferenceDataFileNotFoundError(str(path))
    return fs.read_text(path)


def load_set_aside_catalog(*, path: Path, fs: FileSystem) -> SetAsideCatalog:
    """Load and validate the set-aside catalog from JSON."""
    payload = _read_payload(path, fs)
    try:
        model = _SetAsideCatalogModel.model_validate_json(payload)
    except ValidationError as exc:
        raise ReferenceDataValidationError(str(path), format_validation_error(exc)) from exc
    return SetAsideCatalog(
        definitions=tuple(_to_domain_definition(item) for item in model.set_asides)
    )


def load_naics_psc_defaults(
    *, path: Path, fs: FileSystem
) -> MappingProxyType[str, tuple[str, ...]]:
    """Load NAICS-prefix to PSC-code defaults from JSON."""
    payload = _read_payload(path, fs)
    try:
        model = _NaicsPscDefaultsModel.model_validate_json(payload)
    except ValidationError as exc:
        raise ReferenceDataValidationError(str(path), format_validation_error(exc)) from exc
    return MappingProxyType(dict(model.defaults))


def load_reference_data(*, config: MatchConfig, fs: FileSystem) -> ReferenceData:
    """Load every reference file named by ``config`` into one immutable bundle.

    The NAICS-to-PSC defaults file is optional; the other two are required.
    """
    catalog = load_set_aside_catalog(path=Path(config.set_asides_path), fs=fs)
    policy = load_scoring_policy(path=Path(config.scoring_policy_path), fs=fs)
    defaults_path = Path(config.naics_psc_defaults_path)
    if fs.exists(defaults_path):
        defaults = load_naics_psc_defaults(path=defaults_path, fs=fs)
    else:
        logger.warning("NAICS-to-PSC defaults missing at %s; PSC fallback off", defaults_path)
        defaults = MappingProxyType({})
    logger.info(
        "Loaded %s set-aside definitions and %s NAICS-to-PSC defaults",
        len(catalog.definitions),
        len(defaults),
    )
    return ReferenceData(set_asides=catalog, policy=policy, naics_psc_defaults=defaults)
