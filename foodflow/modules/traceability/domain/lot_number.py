"""
LOT number generation.
Format: YYYYMMDD-<productId>-<NNN>, the date taken in UTC.

- "random": NNN is drawn uniformly from 000-999. Two LOTs of the same product
  made on the same day can collide; ``collision_retries`` extra draws are made
  before a duplicate is accepted.
- "sequential": NNN counts up per (date, product), skipping numbers already taken.
"""
from __future__ import annotations

import random
from collections.abc import Callable
from datetime import datetime, timezone

import structlog

logger = structlog.get_logger(__name__)


def date_prefix(manufacturing_date: datetime) -> str:
    if manufacturing_date.tzinfo is not None:
        manufacturing_date = manufacturing_date.astimezone(timezone.utc)
    return manufacturing_date.strftime("%Y%m%d")


def format_lot_number(manufacturing_date: datetime, product_id: str, sequence: int) -> str:
    return f"{date_prefix(manufacturing_date)}-{product_id}-{sequence:03d}"


class LotNumberGenerator:
    def __init__(
        self,
        strategy: str = "random",
        collision_retries: int = 0,
        rng: random.Random | None = None,
    ) -> None:
        if strategy not in ("random", "sequential"):
            raise ValueError(f"Unknown LOT sequence strategy: {strategy}")
        self._strategy = strategy
        self._collision_retries = max(collision_retries, 0)
        self._rng = rng or random.Random()
        self._counters: dict[tuple[str, str], int] = {}

    def generate(self, product_id: str, manufacturing_date: datetime, exists: Callable[[str], bool]) -> str:
        if self._strategy == "sequential":
            return self._next_sequential(product_id, manufacturing_date, exists)
        return self._next_random(product_id, manufacturing_date, exists)

    def reset(self) -> None:
        self._counters.clear()

    def _next_random(self, product_id: str, manufacturing_date: datetime, exists: Callable[[str], bool]) -> str:
        lot_number = format_lot_number(manufacturing_date, product_id, self._rng.randrange(1000))
        for _ in range(self._collision_retries):
            if not exists(lot_number):
                return lot_number
            logger.info("lot_number_redrawn", lot_number=lot_number)
            lot_number = format_lot_number(manufacturing_date, product_id, self._rng.randrange(1000))
        if exists(lot_number):
            logger.warning("lot_number_collision", lot_number=lot_number, product_id=product_id)
        return lot_number

    def _next_sequential(self, product_id: str, manufacturing_date: datetime, exists: Callable[[str], bool]) -> str:
        key = (date_prefix(manufacturing_date), product_id)
        sequence = self._counters.get(key, 0)
        while True:
            sequence += 1
            lot_number = format_lot_number(manufacturing_date, product_id, sequence)
            if not exists(lot_number):
                break
        self._counters[key] = sequence
        return lot_number
