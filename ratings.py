"""
Player-rating lookup: match a GitScore against a table of players bucketed by rating.
"""

from __future__ import annotations

import json
import logging
import random
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

from scoring import format_one_decimal

logger = logging.getLogger(__name__)

RatingTable = Mapping[str, Tuple[Any, ...]]

EMPTY_TABLE: RatingTable = MappingProxyType({})

_default_rng = random.Random()


def build_rating_table(raw: Mapping[Any, Any]) -> RatingTable:
    """
    Freeze a {score: [entity, ...]} mapping into a RatingTable.

    Keys are normalized to one decimal ("8" and "8.00" both become "8.0");
    buckets that are not lists are dropped.
    """
    table = {}
    for key, bucket in raw.items():
        try:
            norm_key = format_one_decimal(Decimal(str(key).strip()))
        except (ValueError, ArithmeticError):
            logger.warning("Skipping rating bucket with non-numeric key %r", key)
            continue
        if not isinstance(bucket, list):
            logger.warning("Skipping rating bucket %r: expected a list, got %s", key, type(bucket).__name__)
            continue
        table[norm_key] = table.get(norm_key, ()) + tuple(bucket)
    return MappingProxyType(table)


def load_rating_table(path: Union[str, Path, None]) -> RatingTable:
    """
    Load the ratings dataset from a JSON file. Any problem yields an empty table.
    """
    if not path:
        return EMPTY_TABLE
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        logger.warning("Ratings dataset not found at %s; player matching disabled", path)
        return EMPTY_TABLE
    except (OSError, ValueError) as e:
        logger.warning("Could not read ratings dataset %s: %s", path, e)
        return EMPTY_TABLE

    if not isinstance(raw, dict):
        logger.warning("Ratings dataset %s is not a JSON object; player matching disabled", path)
        return EMPTY_TABLE

    table = build_rating_table(raw)
    logger.info("Loaded %d rating buckets from %s", len(table), path)
    return table


def _score_key(score: Any) -> Optional[str]:
    if score is None or isinstance(score, bool):
        return None
    try:
        if isinstance(score, str):
            score = Decimal(score.strip())
        return format_one_decimal(score)
    except (ValueError, TypeError, ArithmeticError):
        return None


def match_rating(table: RatingTable, score: Any, rng: Optional[random.Random] = None) -> Optional[Any]:
    """
    Pick a random entity whose rating equals `score` rounded to one decimal.

    Returns None when the bucket is missing or empty, or `score` is not a number.
    """
    key = _score_key(score)
    if key is None:
        return None
    bucket = table.get(key)
    if not bucket:
        return None
    return (rng or _default_rng).choice(bucket)
