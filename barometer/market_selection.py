"""Sub-market selection and activity heuristics for prediction-market events.

A Gamma "event" bundles several dated binary sub-markets ("... by June 30?",
"... by July 31?") under one title. Only one of them is relevant at a time, and
the feed exposes no individual trades, so unusual activity is inferred from
aggregate volume and price-change fields.
"""
from __future__ import annotations

import datetime as dt
import json
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from barometer.config import MarketSelection
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="market_selection")

HOURS_PER_DAY = 24


@dataclass
class SubMarket:
    """The fields of one Gamma sub-market that selection and pricing look at."""
    question: str
    group_item_title: str
    closed: bool
    accepting_orders: bool
    end_date: Optional[dt.datetime]
    outcome_prices: Any
    volume_num: Optional[float]
    volume_24hr: Optional[float]
    one_hour_price_change: Optional[float]

    @property
    def is_open(self) -> bool:
        return not self.closed and self.accepting_orders

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "SubMarket":
        """Build from a raw Gamma market dict; missing flags read as closed/not accepting."""
        return cls(
            question=str(raw.get("question") or ""),
            group_item_title=str(raw.get("groupItemTitle") or ""),
            closed=_as_bool(raw.get("closed")),
            accepting_orders=_as_bool(raw.get("acceptingOrders")),
            end_date=parse_end_date(raw.get("endDate")),
            outcome_prices=raw.get("outcomePrices"),
            volume_num=as_float(raw.get("volumeNum")),
            volume_24hr=as_float(raw.get("volume24hr")),
            one_hour_price_change=as_float(raw.get("oneHourPriceChange")),
        )


def _as_bool(value: Any) -> bool:
    """Gamma booleans are usually JSON booleans, occasionally strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    if isinstance(value, (int, float)):
        return bool(value)
    return False


def as_float(value: Any) -> Optional[float]:
    """Parse numbers that Gamma may send as JSON numbers or numeric strings."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_end_date(value: Any) -> Optional[dt.datetime]:
    """Parse an ISO-8601 end date; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable sub-market endDate", extra={"end_date": value})
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def select_nearest_end_date(markets: Sequence[SubMarket], now: dt.datetime) -> Optional[SubMarket]:
    """Open sub-market with the soonest end date strictly after `now`."""
    best: Optional[SubMarket] = None
    for market in markets:
        if not market.is_open or market.end_date is None or market.end_date <= now:
            continue
        if best is None or market.end_date < best.end_date:
            best = market
    return best


def select_by_target_date(markets: Sequence[SubMarket], target_date: str) -> Optional[SubMarket]:
    """First open sub-market whose question or group label contains `target_date`."""
    needle = target_date.strip().casefold()
    if not needle:
        return None
    for market in markets:
        if not market.is_open:
            continue
        if needle in market.question.casefold() or needle in market.group_item_title.casefold():
            return market
    return None


def select_sub_market(
    markets: Sequence[SubMarket],
    *,
    strategy: MarketSelection,
    target_date: str = "",
    now: Optional[dt.datetime] = None,
) -> Optional[SubMarket]:
    """Pick the relevant sub-market according to the configured strategy.

    `target_date` falls back to the nearest future end date when no open
    sub-market mentions the target.
    """
    now = now or dt.datetime.now(dt.timezone.utc)
    if strategy is MarketSelection.TARGET_DATE:
        chosen = select_by_target_date(markets, target_date)
        if chosen is not None:
            return chosen
        logger.debug("No sub-market matches target date; using nearest end date", extra={"target_date": target_date})
    return select_nearest_end_date(markets, now)


def parse_outcome_prices(raw: Any) -> Optional[Tuple[float, float]]:
    """Parse `outcomePrices` ('["0.255", "0.745"]') into (yes, no) fractions."""
    prices: Any = raw
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            prices = json.loads(raw)
        except ValueError:
            logger.warning("outcomePrices is not valid JSON", extra={"outcome_prices": raw})
            return None
    if not isinstance(prices, list) or len(prices) < 2:
        return None
    yes, no = as_float(prices[0]), as_float(prices[1])
    if yes is None or no is None:
        return None
    if not all(math.isfinite(p) and 0.0 <= p <= 1.0 for p in (yes, no)):
        logger.warning("outcomePrices outside [0, 1]", extra={"outcome_prices": raw})
        return None
    return yes, no


def detect_big_trade(
    market: SubMarket,
    *,
    hourly_volume_threshold: float,
    price_move_threshold: float,
) -> bool:
    """Flag unusual activity from aggregates: hourly-averaged 24h volume and 1h price move.

    Both must exceed their thresholds; either one alone is ordinary trading.
    """
    if market.volume_24hr is None or market.one_hour_price_change is None:
        return False
    hourly_volume = market.volume_24hr / HOURS_PER_DAY
    return hourly_volume > hourly_volume_threshold and abs(market.one_hour_price_change) > price_move_threshold


def sub_markets_of(event: Mapping[str, Any]) -> List[SubMarket]:
    """Parse the `markets` array of an event, skipping non-object entries."""
    raw_markets = event.get("markets")
    if not isinstance(raw_markets, list):
        return []
    return [SubMarket.from_raw(m) for m in raw_markets if isinstance(m, dict)]
