"""Split free-text ingredient lines into quantity, unit and description."""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from recipe_ai.app.schemas.server_config import UnitDefinition

logger = logging.getLogger(__name__)

FRACTION_MAP = {
    "¼": "1/4",
    "½": "1/2",
    "¾": "3/4",
    "⅐": "1/7",
    "⅑": "1/9",
    "⅒": "1/10",
    "⅓": "1/3",
    "⅔": "2/3",
    "⅕": "1/5",
    "⅖": "2/5",
    "⅗": "3/5",
    "⅘": "4/5",
    "⅙": "1/6",
    "⅚": "5/6",
    "⅛": "1/8",
    "⅜": "3/8",
    "⅝": "5/8",
    "⅞": "7/8",
}
FRACTION_CHARS = "".join(FRACTION_MAP.keys())

_QTY = r"\d+\s+\d+\s*/\s*\d+|\d+\s*/\s*\d+|\d+(?:[.,]\d+)?"
_QTY_LINE_RE = re.compile(rf"^({_QTY})(?:\s*(?:-|–|to)\s*(?:{_QTY}))?\s*(.*)$", flags=re.I)


class ParsedIngredientLine(BaseModel):
    description: str
    quantity: Optional[Decimal] = None
    unit_of_measure_id: Optional[str] = None


def clean_text(text: str) -> str:
    """Normalize whitespace in text."""
    return re.sub(r"\s+", " ", text or "").strip()


def normalize_fractions(text: str) -> str:
    """Rewrite unicode vulgar fractions as ``a/b``, splitting them from a leading digit."""
    text = re.sub(rf"(\d)([{FRACTION_CHARS}])", r"\1 \2", text)
    for char, ascii_fraction in FRACTION_MAP.items():
        text = text.replace(char, ascii_fraction)
    return text


def parse_quantity(raw: Optional[str]) -> Optional[Decimal]:
    """Parse ``2``, ``0.5``, ``0,5``, ``1/2`` or ``1 1/2`` into a Decimal."""
    if raw is None:
        return None
    value = re.sub(r"\s*/\s*", "/", raw.strip()).replace(",", ".")
    if not value:
        return None
    try:
        if " " in value:
            whole_part, frac_part = value.split(" ", 1)
            fraction = parse_quantity(frac_part)
            if fraction is None:
                return None
            return Decimal(whole_part) + fraction
        if "/" in value:
            num_str, denom_str = value.split("/", 1)
            denom = Decimal(denom_str)
            if denom == 0:
                return None
            return Decimal(num_str) / denom
        return Decimal(value)
    except (InvalidOperation, ValueError):
        return None


class UnitLookup:
    """Resolve unit tokens to unit ids; exact spelling wins over case-insensitive matches."""

    def __init__(self, units: Iterable[UnitDefinition]):
        self.exact: Dict[str, str] = {}
        self.folded: Dict[str, str] = {}
        for unit in units:
            for token in unit.tokens():
                token = token.strip()
                if not token:
                    continue
                self.exact.setdefault(token, unit.id)
                self.folded.setdefault(token.casefold(), unit.id)
        self.max_words = max((len(t.split()) for t in self.exact), default=1)

    def resolve(self, token: str) -> Optional[str]:
        token = token.rstrip(".")
        return self.exact.get(token) or self.folded.get(token.casefold())

    def match_prefix(self, words: Sequence[str]) -> Tuple[Optional[str], int]:
        for size in range(min(self.max_words, len(words)), 0, -1):
            unit_id = self.resolve(" ".join(words[:size]))
            if unit_id:
                return unit_id, size
        return None, 0


def parse_ingredient_line(line: str, lookup: UnitLookup) -> Optional[ParsedIngredientLine]:
    raw = clean_text(normalize_fractions(line))
    if not raw:
        return None

    quantity = None
    rest = raw
    match = _QTY_LINE_RE.match(raw)
    if match:
        quantity = parse_quantity(match.group(1))
        rest = match.group(2)

    words = rest.split()
    unit_id, used = lookup.match_prefix(words)
    description_words = words[used:] if unit_id else words
    if description_words and description_words[0].lower() == "of":
        description_words = description_words[1:]
    description = " ".join(description_words) or rest or raw
    return ParsedIngredientLine(description=description, quantity=quantity, unit_of_measure_id=unit_id)


def parse_ingredient_with_defaults(
    lines: Iterable[str], units: Iterable[UnitDefinition]
) -> List[ParsedIngredientLine]:
    """Parse ingredient lines against the configured unit table, skipping blank lines."""
    lookup = UnitLookup(units)
    parsed: List[ParsedIngredientLine] = []
    for idx, line in enumerate(lines):
        ingredient = parse_ingredient_line(line, lookup)
        if ingredient is None:
            logger.debug("Ingredient %d: empty after cleaning", idx)
            continue
        logger.debug(
            "Ingredient %d: '%s' -> description='%s', quantity=%s, unit=%s",
            idx,
            line[:50],
            ingredient.description[:30],
            ingredient.quantity,
            ingredient.unit_of_measure_id,
        )
        parsed.append(ingredient)
    return parsed
