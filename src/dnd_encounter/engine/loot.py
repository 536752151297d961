"""Challenge-rating XP, coin rolls and the encounter's loot and XP logs."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from dnd_encounter.core.exceptions import ValidationError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.dice import roll
from dnd_encounter.engine.rng import derive_seed
from dnd_encounter.models import CoinBundle, EncounterState, LootEntry, XpEntry


logger = get_logger(__name__)

# =============================================================================
# Tables
# =============================================================================

CR_XP: dict[str, int] = {
    "0": 10,
    "1/8": 25,
    "1/4": 50,
    "1/2": 100,
    "1": 200,
    "2": 450,
    "3": 700,
    "4": 1100,
    "5": 1800,
    "6": 2300,
    "7": 2900,
    "8": 3900,
    "9": 5000,
    "10": 5900,
}
"""Experience per monster by challenge rating."""

CR_COINS: dict[str, dict[str, str]] = {
    "0": {"cp": "1d6x5"},
    "1/8": {"cp": "1d6x10"},
    "1/4": {"sp": "1d6x5"},
    "1/2": {"sp": "1d6x10"},
    "1": {"gp": "2d6x10"},
    "2": {"gp": "4d6x10"},
    "3": {"gp": "5d6x10"},
    "4": {"gp": "6d6x10"},
    "5": {"gp": "8d6x10", "pp": "1d6x1"},
    "6": {"gp": "10d6x10", "pp": "1d6x2"},
    "7": {"gp": "12d6x10", "pp": "2d6x2"},
    "8": {"gp": "15d6x10", "pp": "2d6x5"},
    "9": {"gp": "18d6x10", "pp": "2d6x10"},
    "10": {"gp": "20d6x10", "pp": "3d6x10"},
}
"""Coin dice per denomination by challenge rating, as ``NdMxK``."""

_COIN_EXPR = re.compile(r"^(\d+)d(\d+)(?:x(\d+))?$", re.IGNORECASE)


# =============================================================================
# Rolling
# =============================================================================


def xp_for_cr(cr: str) -> int:
    """XP for one monster; unknown ratings are worth nothing."""
    return CR_XP.get(str(cr).strip(), 0)


def total_xp(crs: Iterable[str]) -> int:
    return sum(xp_for_cr(cr) for cr in crs)


def roll_coin_expression(expression: str, seed: str | None = None) -> int:
    """Roll ``NdM`` or ``NdMxK`` coin notation.

    Each die is rolled on its own, seeded ``<seed>:<i>``.

    Raises:
        ValidationError: If the notation is malformed.
    """
    match = _COIN_EXPR.match(expression.strip())
    if not match:
        raise ValidationError(
            f"Invalid coin expression: {expression}",
            field_name="expression",
            invalid_value=expression,
        )
    count, faces = int(match.group(1)), int(match.group(2))
    multiplier = int(match.group(3) or 1)
    total = sum(roll(f"1d{faces}", seed=derive_seed(seed, str(i))).total for i in range(count))
    return total * multiplier


def roll_coins_for_cr(cr: str, seed: str | None = None) -> CoinBundle:
    """Roll a monster's coins by challenge rating; unknown ratings give nothing.

    Each denomination rolls from its own seed, ``<seed>:<denomination>``.
    """
    table = CR_COINS.get(str(cr).strip(), {})
    coins = {
        denomination: roll_coin_expression(expression, derive_seed(seed, denomination))
        for denomination, expression in table.items()
    }
    return CoinBundle(**coins)


# =============================================================================
# Logs
# =============================================================================


def record_loot(
    state: EncounterState,
    coins: CoinBundle | Mapping[str, int] | None = None,
    items: Iterable[str] = (),
    note: str | None = None,
) -> EncounterState:
    """Append a loot entry to the encounter's log."""
    if coins is None:
        bundle = CoinBundle()
    elif isinstance(coins, CoinBundle):
        bundle = coins
    else:
        bundle = CoinBundle.model_validate(dict(coins))
    entry = LootEntry(coins=bundle, items=tuple(items), note=note)
    logger.info("Loot recorded", encounter_id=state.id, coins=bundle.model_dump(), items=list(entry.items))
    return state.model_copy(update={"loot_log": (*state.loot_log, entry)})


def record_xp(
    state: EncounterState,
    crs: Iterable[str],
    total: int | None = None,
) -> EncounterState:
    """Append an XP award; the total defaults to the sum for ``crs``."""
    ratings = tuple(str(cr) for cr in crs)
    entry = XpEntry(crs=ratings, total=total if total is not None else total_xp(ratings))
    logger.info("XP recorded", encounter_id=state.id, crs=list(ratings), total=entry.total)
    return state.model_copy(update={"xp_log": (*state.xp_log, entry)})


__all__ = [
    "CR_XP",
    "CR_COINS",
    "xp_for_cr",
    "total_xp",
    "roll_coin_expression",
    "roll_coins_for_cr",
    "record_loot",
    "record_xp",
]
