"""
Supplier adapters.

Each search supplier returns its own payload shape. The adapters here map
those shapes into ``CandidateActivity`` at the boundary so scoring only
ever sees one type.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, time, tzinfo
from typing import Any

from wink.errors import UnsupportedSupplierError, ValidationError
from wink.infrastructure.observability.logging import get_logger

from .domain.models import CandidateActivity, GeoPoint

logger = get_logger(__name__)

Payload = Mapping[str, Any]

POPULARITY_LEVELS = {"high": 1.0, "medium": 0.7, "low": 0.4}
MAX_UNIQUENESS_SCORE = 35.0
DEFAULT_EVENT_TIME = time(12, 0)
_DOLLAR_AMOUNT = re.compile(r"\$\s*(\d+(?:\.\d+)?)")


def parse_price(raw: Any) -> tuple[float | None, int | None]:
    """
    Turn a supplier price ("Free", "$25", "$10-$30", 12.5) into (price, level).

    Ranges are averaged. Unparseable text yields ``(None, None)``.
    """
    if raw is None:
        return None, None
    if isinstance(raw, bool):
        raise ValidationError(f"Invalid price: {raw!r}")
    if isinstance(raw, int | float):
        if raw < 0:
            raise ValidationError(f"Invalid price: {raw!r}")
        return float(raw), price_level_for(float(raw))

    text = str(raw).strip().lower()
    if not text:
        return None, None
    if "free" in text or text == "0":
        return 0.0, 0

    amounts = [float(m) for m in _DOLLAR_AMOUNT.findall(text)]
    if not amounts:
        try:
            amounts = [float(text)]
        except ValueError:
            return None, None

    price = sum(amounts) / len(amounts)
    return price, price_level_for(price)


def price_level_for(price: float) -> int:
    if price <= 0:
        return 0
    if price <= 10:
        return 1
    if price <= 30:
        return 2
    if price <= 60:
        return 3
    return 4


def parse_timestamp(
    date_value: Any, time_value: Any = None, *, tz: tzinfo | None = None
) -> datetime | None:
    """Combine a supplier date and optional time-of-day into one datetime."""
    if date_value in (None, ""):
        return None
    try:
        if isinstance(date_value, datetime):
            parsed = date_value
        else:
            text = str(date_value).strip().replace("Z", "+00:00")
            parsed = datetime.fromisoformat(text)
            if "T" not in text and " " not in text:
                clock = (
                    time.fromisoformat(str(time_value).strip())
                    if time_value
                    else DEFAULT_EVENT_TIME
                )
                parsed = datetime.combine(parsed.date(), clock)
    except ValueError as exc:
        raise ValidationError(f"Invalid activity date: {date_value!r}") from exc

    if parsed.tzinfo is None and tz is not None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def _coordinates(lat: Any, lng: Any) -> GeoPoint | None:
    if lat is None or lng is None:
        return None
    try:
        return GeoPoint(float(lat), float(lng))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid coordinates: ({lat!r}, {lng!r})") from exc


def _optional_float(value: Any, field_name: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {field_name}: {value!r}") from exc


def _optional_int(value: Any, field_name: str) -> int | None:
    number = _optional_float(value, field_name)
    return int(number) if number is not None else None


def _require(payload: Payload, key: str) -> Any:
    value = payload.get(key)
    if value in (None, ""):
        raise ValidationError(f"Activity payload is missing '{key}'")
    return value


def from_overpass(payload: Payload, *, tz: tzinfo | None = None) -> CandidateActivity:
    """OpenStreetMap element returned by an Overpass query."""
    tags = payload.get("tags") or {}
    element_id = _require(payload, "id")
    name = (
        tags.get("name")
        or tags.get("amenity")
        or tags.get("leisure")
        or tags.get("shop")
        or "Unknown Activity"
    )
    category = (
        tags.get("sport")
        or tags.get("tourism")
        or tags.get("leisure")
        or tags.get("amenity")
        or tags.get("shop")
        or "general"
    )
    fee = str(tags.get("fee") or "").lower()
    rating = _optional_float(tags.get("rating"), "rating")

    return CandidateActivity(
        id=f"osm-{element_id}",
        name=name,
        category=category,
        source="overpass",
        description=tags.get("description") or f"{category} activity",
        location_name=tags.get("addr:full"),
        location=_coordinates(payload.get("lat"), payload.get("lon")),
        price_level=2 if fee and fee not in ("no", "free", "0") else 0,
        popularity=max(0.0, min(rating / 5, 1.0)) if rating is not None else None,
    )


def from_live_event(payload: Payload, *, tz: tzinfo | None = None) -> CandidateActivity:
    """Event scraped from a ticketing or listings site."""
    title = _require(payload, "title")
    price, level = parse_price(payload.get("price"))
    if level is None:
        level = _optional_int(payload.get("priceLevel"), "priceLevel")
    popularity = POPULARITY_LEVELS.get(str(payload.get("popularity") or "medium").lower())

    return CandidateActivity(
        id=str(payload.get("id") or f"event-{title}-{payload.get('date', '')}"),
        name=title,
        category=payload.get("category") or "event",
        source="live_event",
        description=payload.get("description") or "",
        location_name=payload.get("location"),
        location=_coordinates(payload.get("lat"), payload.get("lng")),
        starts_at=parse_timestamp(payload.get("date"), payload.get("time"), tz=tz),
        price=price,
        price_level=level,
        popularity=popularity,
        url=payload.get("url"),
    )


def from_generated(payload: Payload, *, tz: tzinfo | None = None) -> CandidateActivity:
    """Activity suggested by the generative search supplier."""
    name = _require(payload, "name")
    price, level = parse_price(payload.get("estimated_cost"))
    if level is None:
        level = _optional_int(payload.get("price_level"), "price_level")
    uniqueness = _optional_float(payload.get("uniqueness_score"), "uniqueness_score")
    popularity = (
        max(0.0, min(uniqueness, MAX_UNIQUENESS_SCORE)) / MAX_UNIQUENESS_SCORE
        if uniqueness is not None
        else None
    )
    description = payload.get("description") or payload.get("what_makes_it_special") or ""

    return CandidateActivity(
        id=str(payload.get("id") or f"generated-{name}"),
        name=name,
        category=payload.get("category") or "general",
        source="generated",
        description=description,
        location_name=payload.get("address") or payload.get("area"),
        location=_coordinates(payload.get("latitude"), payload.get("longitude")),
        starts_at=parse_timestamp(payload.get("date"), payload.get("time"), tz=tz),
        price=price,
        price_level=level,
        popularity=popularity,
        distance_km=_optional_float(payload.get("distance_km"), "distance_km"),
    )


def from_stored(payload: Payload, *, tz: tzinfo | None = None) -> CandidateActivity:
    """Row from the application's own activities table."""
    rating = _optional_float(payload.get("rating"), "rating")
    level = _optional_int(payload.get("price_level"), "price_level")
    return CandidateActivity(
        id=str(_require(payload, "id")),
        name=_require(payload, "name"),
        category=payload.get("category") or "general",
        source="stored",
        description=payload.get("description") or "",
        location_name=payload.get("address"),
        location=_coordinates(payload.get("lat"), payload.get("lng")),
        price_level=level,
        popularity=max(0.0, min(rating / 5, 1.0)) if rating is not None else None,
    )


ADAPTERS: dict[str, Callable[..., CandidateActivity]] = {
    "overpass": from_overpass,
    "live_event": from_live_event,
    "generated": from_generated,
    "stored": from_stored,
}


def normalize_activity(
    payload: Payload, source: str, *, tz: tzinfo | None = None
) -> CandidateActivity:
    adapter = ADAPTERS.get(source)
    if adapter is None:
        raise UnsupportedSupplierError(f"No adapter registered for supplier '{source}'")
    if not isinstance(payload, Mapping):
        raise ValidationError(f"Activity payload must be an object, got {type(payload).__name__}")
    return adapter(payload, tz=tz)


def normalize_activities(
    items: Iterable[tuple[Payload, str]], *, tz: tzinfo | None = None
) -> list[CandidateActivity]:
    """Normalize a batch, skipping (and logging) payloads that fail validation."""
    activities = []
    skipped = 0
    for payload, source in items:
        try:
            activities.append(normalize_activity(payload, source, tz=tz))
        except UnsupportedSupplierError:
            raise
        except ValidationError as exc:
            skipped += 1
            logger.warning("Skipping malformed activity payload", source=source, error=str(exc))
    if skipped:
        logger.info("Activity batch normalized", kept=len(activities), skipped=skipped)
    return activities
