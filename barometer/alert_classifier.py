"""Civil-alert payload parsing, city-name normalization and severity classification.

The feed is low-trust: the body may be empty, a single JSON object, a JSON
array of records, or garbage. City names arrive with inconsistent dashes,
quotes and district suffixes ("תל אביב - יפו" vs "תל אביב"), so names are
normalized before the bidirectional containment match.

Everything in this module is pure; fetching and caching live in
`barometer.pipelines.alerts`.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from barometer.domain import AlertStatus, CityObservation, Severity
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="alert_classifier")

EMPTY_BODIES = {"", "[]", "{}"}

# comma, Arabic comma, newlines
CITY_DELIMITERS = re.compile(r"[,،\r\n]")

# hyphen, en-dash, em-dash, Hebrew maqaf, comma, and straight/Hebrew quote marks
_SEPARATOR_CHARS = "-–—־,\"'׳״"
_SEPARATOR_TABLE = str.maketrans({ch: " " for ch in _SEPARATOR_CHARS})
_WHITESPACE = re.compile(r"\s+")

MAJOR_REGION_COUNT = 3


class AlertRecord(BaseModel):
    """One record of the civil-alert feed. `data` holds the city list."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    category: Optional[str] = Field(default=None, validation_alias=AliasChoices("category", "cat"))
    title: Optional[str] = None
    data: str = ""
    description: Optional[str] = Field(default=None, validation_alias=AliasChoices("description", "desc"))

    @field_validator("id", "category", "title", "description", mode="before")
    @classmethod
    def _coerce_scalar(cls, v):
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("data", mode="before")
    @classmethod
    def _join_city_list(cls, v):
        """Some feed revisions send `data` as a list of names rather than one string."""
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return "\n".join(str(item) for item in v if item is not None)
        return v


@dataclass(frozen=True)
class ParsedAsList:
    records: List[AlertRecord]


@dataclass(frozen=True)
class ParsedAsSingle:
    record: AlertRecord

    @property
    def records(self) -> List[AlertRecord]:
        return [self.record]


@dataclass(frozen=True)
class Unparseable:
    reason: str

    @property
    def records(self) -> List[AlertRecord]:
        return []


ParseOutcome = Union[ParsedAsList, ParsedAsSingle, Unparseable]


def is_empty_body(body: Optional[str]) -> bool:
    """True for bodies the feed uses to mean "no active alerts"."""
    return _strip_bom(body or "").strip() in EMPTY_BODIES


def _strip_bom(text: str) -> str:
    return text.lstrip("\ufeff")


def parse_alert_payload(body: str) -> ParseOutcome:
    """Classify the raw body as a list of records, a single record, or unparseable."""
    text = _strip_bom(body or "").strip()
    try:
        payload = json.loads(text)
    except ValueError as exc:
        return Unparseable(reason=f"invalid JSON: {exc}")

    # "{ }" and "[\n]" say nothing, however they are spaced.
    if payload == {} or payload == []:
        return ParsedAsList(records=[])

    if isinstance(payload, list):
        if not all(isinstance(item, dict) for item in payload):
            return Unparseable(reason="array contains non-object entries")
        try:
            return ParsedAsList(records=[AlertRecord.model_validate(item) for item in payload])
        except ValidationError as exc:
            return Unparseable(reason=f"invalid alert record: {exc.error_count()} error(s)")

    if isinstance(payload, dict):
        try:
            return ParsedAsSingle(record=AlertRecord.model_validate(payload))
        except ValidationError as exc:
            return Unparseable(reason=f"invalid alert record: {exc.error_count()} error(s)")

    return Unparseable(reason=f"unexpected JSON type {type(payload).__name__}")


def split_cities(records: Iterable[AlertRecord]) -> List[str]:
    """Split every record's city list, trimmed and deduplicated in first-seen order."""
    seen: dict[str, None] = {}
    for record in records:
        if not record.data:
            continue
        for part in CITY_DELIMITERS.split(record.data):
            name = part.strip()
            if name:
                seen.setdefault(name, None)
    return list(seen)


def normalize_city(name: str) -> str:
    """Replace dashes and quotes with spaces, collapse whitespace, trim."""
    if not name:
        return ""
    return _WHITESPACE.sub(" ", name.translate(_SEPARATOR_TABLE)).strip()


def cities_match(a: str, b: str) -> bool:
    """Bidirectional, case-insensitive containment of the normalized names."""
    na = normalize_city(a).casefold()
    nb = normalize_city(b).casefold()
    if not na or not nb:
        return False
    return na in nb or nb in na


def translate_city(name: str, translations: Mapping[str, str]) -> str:
    """Exact translation, else the longest known name contained in `name`, else `name`."""
    if name in translations:
        return translations[name]
    best: Optional[str] = None
    for known in translations:
        if known and known in name and (best is None or len(known) > len(best)):
            best = known
    return translations[best] if best is not None else name


def observe_cities(names: Sequence[str], translations: Mapping[str, str]) -> List[CityObservation]:
    """Build the observation for each distinct raw city name."""
    return [
        CityObservation(raw=name, normalized=normalize_city(name), display=translate_city(name, translations))
        for name in names
    ]


def match_major_regions(cities: Sequence[CityObservation], major_regions: Mapping[str, str]) -> List[str]:
    """Display names of the configured regions matched by at least one active city."""
    matched: List[str] = []
    for region, display in major_regions.items():
        if any(cities_match(city.raw, region) for city in cities):
            matched.append(display)
    return matched


def classify(has_any_alert: bool, matched_regions: Sequence[str]) -> Severity:
    """MajorAlert needs all three regions; any other alert is Alert."""
    if len(matched_regions) >= MAJOR_REGION_COUNT:
        return Severity.MAJOR_ALERT
    if has_any_alert:
        return Severity.ALERT
    return Severity.SAFE


def build_alert_status(
    outcome: ParseOutcome,
    major_regions: Mapping[str, str],
    translations: Mapping[str, str],
) -> AlertStatus:
    """Turn a parse outcome into an `AlertStatus`."""
    if isinstance(outcome, Unparseable):
        logger.warning("Could not parse alert payload; treating as no alerts", extra={"reason": outcome.reason})
        return AlertStatus(severity=Severity.SAFE, has_any_alert=False)

    records = outcome.records
    if not records:
        return AlertStatus(severity=Severity.SAFE, has_any_alert=False)

    cities = observe_cities(split_cities(records), translations)
    matched = match_major_regions(cities, major_regions)
    severity = classify(True, matched)
    return AlertStatus(
        severity=severity,
        has_any_alert=True,
        active_cities=cities,
        matched_major_cities=matched,
    )
