"""Dice expression parsing and seeded rolling.

Expressions are sums of signed terms: dice terms ``NdM`` (``d20`` means
``1d20``) and flat integers. Whitespace is ignored. Every roll draws from
a random source built from the caller's seed, so the same expression and
seed always give the same dice in the same order.

Example:
    >>> result = roll("1d20+5", seed="hero", advantage=True)
    >>> result.rolls, result.total, result.expression
    ((7, 12), 17, '1d20+5 adv')
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from dnd_encounter.core.constants import D20_SIDES
from dnd_encounter.core.exceptions import DiceRollError
from dnd_encounter.core.logging import get_logger
from dnd_encounter.engine.rng import RandomSource, seeded_random


logger = get_logger(__name__)

_TERM_PATTERN = re.compile(r"[+-]?[^+-]+")
_DICE_PATTERN = re.compile(r"^(\d*)d(\d+)$", re.IGNORECASE)
_FLAT_PATTERN = re.compile(r"^\d+$")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class DiceTerm:
    """A signed ``NdM`` term.

    Attributes:
        sign: +1 or -1.
        count: Number of dice, at least 1.
        sides: Faces per die, at least 2.
    """

    sign: int
    count: int
    sides: int

    @property
    def body(self) -> str:
        return f"{self.count}d{self.sides}"

    @property
    def is_bare_d20(self) -> bool:
        return self.count == 1 and self.sides == D20_SIDES


@dataclass(frozen=True)
class FlatTerm:
    """A signed constant modifier."""

    sign: int
    value: int

    @property
    def body(self) -> str:
        return str(self.value)


Term = DiceTerm | FlatTerm


@dataclass(frozen=True)
class ParsedExpression:
    """A validated expression with its canonical spelling.

    Attributes:
        terms: Terms in source order.
        normalized: Canonical form, e.g. ``1d20+5`` or ``-1d4+2d6-1``.
    """

    terms: tuple[Term, ...]
    normalized: str

    @property
    def dice_terms(self) -> tuple[DiceTerm, ...]:
        return tuple(term for term in self.terms if isinstance(term, DiceTerm))

    @property
    def flat_total(self) -> int:
        """Signed sum of the flat modifiers."""
        return sum(term.sign * term.value for term in self.terms if isinstance(term, FlatTerm))


@dataclass(frozen=True)
class RollResult:
    """Outcome of rolling an expression.

    Attributes:
        rolls: Every die result in roll order, including both dice of an
            advantage or disadvantage pair.
        total: Signed sum of the kept dice and the flat modifiers.
        expression: Canonical expression, suffixed ``adv`` or ``dis``.
    """

    rolls: tuple[int, ...]
    total: int
    expression: str


def format_terms(terms: tuple[Term, ...]) -> str:
    parts: list[str] = []
    for index, term in enumerate(terms):
        if index == 0:
            parts.append(f"-{term.body}" if term.sign < 0 else term.body)
        else:
            parts.append(f"{'-' if term.sign < 0 else '+'}{term.body}")
    return "".join(parts)


def parse_expression(expression: str) -> ParsedExpression:
    """Parse a dice expression.

    Args:
        expression: Expression such as ``2d6+3`` or ``1d20 - 1``.

    Returns:
        The parsed terms and their canonical spelling.

    Raises:
        DiceRollError: If the expression is empty, a token is unparsable,
            a dice count is below 1, or a die has fewer than 2 sides.
    """
    compact = _WHITESPACE.sub("", expression or "")
    if not compact:
        raise DiceRollError("Empty dice expression", expression=expression)

    tokens = _TERM_PATTERN.findall(compact)
    if "".join(tokens) != compact:
        raise DiceRollError(f"Invalid dice expression: {expression}", expression=expression)

    terms: list[Term] = []
    for raw_token in tokens:
        sign = -1 if raw_token.startswith("-") else 1
        token = raw_token.lstrip("+-")

        dice_match = _DICE_PATTERN.match(token)
        if dice_match:
            count_text, sides_text = dice_match.groups()
            count = int(count_text) if count_text else 1
            sides = int(sides_text)
            if count < 1:
                raise DiceRollError(
                    f"Invalid dice count in token: {raw_token}",
                    expression=expression,
                    token=raw_token,
                )
            if sides < 2:
                raise DiceRollError(
                    f"Invalid dice sides in token: {raw_token}",
                    expression=expression,
                    token=raw_token,
                )
            terms.append(DiceTerm(sign=sign, count=count, sides=sides))
            continue

        if not _FLAT_PATTERN.match(token):
            raise DiceRollError(
                f"Invalid modifier in token: {raw_token}",
                expression=expression,
                token=raw_token,
            )
        terms.append(FlatTerm(sign=sign, value=int(token)))

    parsed = tuple(terms)
    return ParsedExpression(terms=parsed, normalized=format_terms(parsed))


def _advantage_target(terms: tuple[Term, ...]) -> int | None:
    """Pick the term index that advantage or disadvantage applies to.

    The first bare ``1d20`` wins; failing that, the only d20 term when
    there is exactly one. Several non-bare d20 terms leave nothing eligible.
    """
    d20_indexes = [
        index
        for index, term in enumerate(terms)
        if isinstance(term, DiceTerm) and term.sides == D20_SIDES
    ]
    for index in d20_indexes:
        term = terms[index]
        if isinstance(term, DiceTerm) and term.is_bare_d20:
            return index
    if len(d20_indexes) == 1:
        return d20_indexes[0]
    return None


def roll_die(sides: int, rng: RandomSource) -> int:
    """Roll a single die."""
    return int(rng() * sides) + 1


def roll(
    expression: str,
    *,
    seed: str | None = None,
    advantage: bool = False,
    disadvantage: bool = False,
    rng: RandomSource | None = None,
) -> RollResult:
    """Roll a dice expression.

    Args:
        expression: Expression to roll.
        seed: Seed for reproducible results. Ignored when ``rng`` is given.
        advantage: Roll the eligible d20 term twice and keep the higher.
        disadvantage: Roll the eligible d20 term twice and keep the lower.
        rng: Explicit random source.

    Returns:
        RollResult with every die rolled, the total and the canonical
        expression.

    Raises:
        DiceRollError: If the expression is invalid or both advantage and
            disadvantage are requested.
    """
    if advantage and disadvantage:
        raise DiceRollError(
            "Cannot roll with both advantage and disadvantage",
            expression=expression,
        )

    parsed = parse_expression(expression)
    source = rng if rng is not None else seeded_random(seed)
    target = _advantage_target(parsed.terms) if (advantage or disadvantage) else None

    rolls: list[int] = []
    total = 0
    for index, term in enumerate(parsed.terms):
        if isinstance(term, FlatTerm):
            total += term.sign * term.value
            continue

        if index == target:
            first = [roll_die(term.sides, source) for _ in range(term.count)]
            second = [roll_die(term.sides, source) for _ in range(term.count)]
            rolls.extend(first)
            rolls.extend(second)
            pick = max if advantage else min
            total += term.sign * pick(sum(first), sum(second))
            continue

        for _ in range(term.count):
            value = roll_die(term.sides, source)
            rolls.append(value)
            total += term.sign * value

    suffix = " adv" if advantage else " dis" if disadvantage else ""
    result = RollResult(rolls=tuple(rolls), total=total, expression=f"{parsed.normalized}{suffix}")

    logger.debug(
        "Dice rolled",
        expression=result.expression,
        rolls=list(result.rolls),
        total=result.total,
        seeded=bool(seed) or rng is not None,
    )
    return result


__all__ = [
    "DiceTerm",
    "FlatTerm",
    "ParsedExpression",
    "RollResult",
    "format_terms",
    "parse_expression",
    "roll",
    "roll_die",
]
