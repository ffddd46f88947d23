"""
GitScore composite scoring.

Six log/linear sub-scores, each clamped to [0, 10], combined with fixed weights
into a 0-10 composite rounded to one decimal.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional

# Order matters only for float summation; keep it fixed.
WEIGHTS: Dict[str, float] = {
    "popularity": 0.20,
    "impact": 0.20,
    "volume": 0.20,
    "activity": 0.10,
    "consistency": 0.15,
    "tenure": 0.15,
}

DAYS_PER_YEAR = 365.25
MAX_SUBSCORE = 10.0

_ONE_DECIMAL = Decimal("0.1")


class InvalidInput(ValueError):
    pass


@dataclass(frozen=True)
class MetricsInput:
    followers: int
    public_repos: int
    total_stars: int
    total_commits: int
    active_days: int
    account_created_at: dt.datetime


@dataclass(frozen=True)
class ScoreBreakdown:
    popularity: float
    impact: float
    activity: float
    tenure: float
    volume: float
    consistency: float
    final_score: float
    years_on_platform: float

    @property
    def final_score_text(self) -> str:
        return format_one_decimal(self.final_score)

    @property
    def years_text(self) -> str:
        return format_one_decimal(self.years_on_platform)

    def subscores(self, digits: int = 2) -> Dict[str, float]:
        return {name: round(getattr(self, name), digits) for name in WEIGHTS}


# -----------------------------
# Rounding
# -----------------------------
def format_one_decimal(value: Any) -> str:
    """
    Format a number with exactly one fractional digit, rounding half away from zero.

    Rounding is applied to the shortest decimal representation of the value
    (what ``repr`` prints), so 8.05 -> "8.1" and 8.04 -> "8.0".
    """
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, Decimal):
        d = value
    else:
        d = Decimal(repr(float(value)))
    if not d.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    try:
        return str(d.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))
    except InvalidOperation as e:
        raise ValueError(f"cannot format {value!r} to one decimal") from e


def _round_one(value: float) -> float:
    return float(format_one_decimal(value))


# -----------------------------
# Validation
# -----------------------------
def _check_count(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"{name} must be a number, got {type(value).__name__}")
    # ints stay exact; math.log10 accepts ints of any size
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidInput(f"{name} must be finite, got {value!r}")
    if value < 0:
        raise InvalidInput(f"{name} must be >= 0, got {value!r}")
    return value


def _check_timestamp(name: str, value: Any) -> dt.datetime:
    if not isinstance(value, dt.datetime):
        raise InvalidInput(f"{name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidInput(f"{name} must be timezone-aware")
    return value


# -----------------------------
# Sub-scores
# -----------------------------
def _clamp(x: float, lo: float = 0.0, hi: float = MAX_SUBSCORE) -> float:
    return max(lo, min(hi, x))


def _log_score(count: float, decades: float) -> float:
    # log10(count + 1) reaching `decades` saturates the sub-score
    return _clamp((math.log10(count + 1) / decades) * 10)


def years_between(start: dt.datetime, end: dt.datetime) -> float:
    days = (end - start).total_seconds() / 86400.0
    return days / DAYS_PER_YEAR


def compute_score(metrics: MetricsInput, now: Optional[dt.datetime] = None) -> ScoreBreakdown:
    followers = _check_count("followers", metrics.followers)
    public_repos = _check_count("public_repos", metrics.public_repos)
    total_stars = _check_count("total_stars", metrics.total_stars)
    total_commits = _check_count("total_commits", metrics.total_commits)
    active_days = _check_count("active_days", metrics.active_days)
    created_at = _check_timestamp("account_created_at", metrics.account_created_at)

    if now is None:
        now = dt.datetime.now(dt.timezone.utc)
    else:
        now = _check_timestamp("now", now)

    # A creation date in the future (clock skew) counts as a brand-new account.
    years = max(0.0, years_between(created_at, now))

    popularity = _log_score(followers, 5)
    impact = _log_score(total_stars, 6)
    activity = _log_score(public_repos, 3)
    volume = _log_score(total_commits, 5)
    consistency = _clamp((min(active_days, 365) / 365) * 10)
    tenure = _clamp(years)

    subscores = {
        "popularity": popularity,
        "impact": impact,
        "volume": volume,
        "activity": activity,
        "consistency": consistency,
        "tenure": tenure,
    }
    weighted = 0.0
    for name, weight in WEIGHTS.items():
        weighted += subscores[name] * weight

    return ScoreBreakdown(
        popularity=popularity,
        impact=impact,
        activity=activity,
        tenure=tenure,
        volume=volume,
        consistency=consistency,
        final_score=_round_one(_clamp(weighted)),
        years_on_platform=_round_one(years),
    )
