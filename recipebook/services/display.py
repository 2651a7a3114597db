"""Turn stored ingredient/step text into table rows for rendering.

Stored recipes keep ingredients and steps as free text, so rows are
recomputed on every read. Detectors decide whether a block is tabular at
all; a ``None`` result means "render the text as-is".
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

# Section headers are short titles; longer lines are narrative steps even
# when they start with a header phrase ("Serve warm or chill for 2 hours...").
MAX_HEADER_LENGTH = 40

DASH_SEPARATOR_PATTERN = re.compile(r" [-–—] ")
TRAILING_DASH_PATTERN = re.compile(r"\s+[-–—]$")

_UNIT = (
    r"g|kg|ml|l|cups?|tsp|tbsp|oz|lb|pieces?|cloves?|inch|cm|mm|nos?|small|medium|large"
    r"|to taste|as needed|optional|handful|bunch|sprigs?|pinch"
)
_DUAL_UNIT = r"g|kg|ml|l|cups?|tsp|tbsp|oz|lb"
_NUMBER = r"(?:\d+/\d+|\d+\.?\d*)"
_BARE_QUANTITY = r"pinch|to taste|as needed|optional|a few|handful|bunch"

QUANTITY_PATTERN = re.compile(
    rf"^(.+?)\s+((?:{_NUMBER}\s*(?:{_UNIT})?(?:\s*/\s*{_NUMBER}\s*(?:{_DUAL_UNIT})?)?)|{_BARE_QUANTITY})$",
    re.IGNORECASE,
)
NUMBERED_LINE_PATTERN = re.compile(r"^\d+[.):\s]")
STEP_NUMBER_PATTERN = re.compile(r"^(\d+)[.):\s]+(.+)$")
HEADER_PHRASE_PATTERN = re.compile(
    r"^(to \w+|for the|for making|making the|prepare the|preparing|assembly|finishing"
    r"|decoration|garnish|serve|serving|notes?:)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class IngredientRow:
    ingredient: str
    quantity: str = ""
    is_header: bool = False


@dataclass(frozen=True)
class StepRow:
    number: str
    instruction: str
    is_header: bool = False


LineDetector = Callable[[Sequence[str]], bool]


def split_lines(text: Optional[str]) -> list[str]:
    if not text:
        return []
    return [line.strip() for line in text.strip().splitlines() if line.strip()]


def has_dash_separator(lines: Sequence[str]) -> bool:
    """Any line uses "name - qty" (or a bare "name -") with a hyphen, en-dash or em-dash."""
    return any(
        DASH_SEPARATOR_PATTERN.search(line) or TRAILING_DASH_PATTERN.search(line)
        for line in lines
    )


def has_trailing_quantity(lines: Sequence[str]) -> bool:
    """Any line ends in a quantity such as "2 cups", "1/2 tsp" or "to taste"."""
    return any(QUANTITY_PATTERN.match(line) for line in lines)


def has_numbered_lines(lines: Sequence[str]) -> bool:
    """Any line starts with digits followed by '.', ')', ':' or whitespace."""
    return any(NUMBERED_LINE_PATTERN.match(line) for line in lines)


INGREDIENT_DETECTORS: tuple[tuple[str, LineDetector], ...] = (
    ("dash_separator", has_dash_separator),
    ("trailing_quantity", has_trailing_quantity),
)
STEP_DETECTORS: tuple[tuple[str, LineDetector], ...] = (
    ("numbered_lines", has_numbered_lines),
)


def detect_format(lines: Sequence[str], detectors: Sequence[tuple[str, LineDetector]]) -> Optional[str]:
    for name, detector in detectors:
        if detector(lines):
            return name
    return None


def _split_ingredient(line: str) -> tuple[str, str]:
    matches = list(DASH_SEPARATOR_PATTERN.finditer(line))
    if matches:
        last = matches[-1]
        return line[: last.start()].strip(), line[last.end():].strip()

    if TRAILING_DASH_PATTERN.search(line):
        return TRAILING_DASH_PATTERN.sub("", line).strip(), ""

    match = QUANTITY_PATTERN.match(line)
    if match:
        return match.group(1).strip(), match.group(2).strip()
    return line, ""


def _is_ingredient_header(line: str, ingredient: str, quantity: str) -> bool:
    if quantity or not ingredient:
        return False
    if TRAILING_DASH_PATTERN.search(line):
        return False
    return not QUANTITY_PATTERN.match(ingredient)


def parse_ingredients(text: Optional[str]) -> Optional[list[IngredientRow]]:
    lines = split_lines(text)
    if detect_format(lines, INGREDIENT_DETECTORS) is None:
        return None

    rows: list[IngredientRow] = []
    for line in lines:
        ingredient, quantity = _split_ingredient(line)
        if _is_ingredient_header(line, ingredient, quantity):
            rows.append(IngredientRow(ingredient=ingredient, is_header=True))
        else:
            rows.append(IngredientRow(ingredient=ingredient, quantity=quantity))
    return rows


def is_step_header(text: str) -> bool:
    return len(text) <= MAX_HEADER_LENGTH and bool(HEADER_PHRASE_PATTERN.match(text))


def parse_steps(text: Optional[str]) -> Optional[list[StepRow]]:
    lines = split_lines(text)
    if detect_format(lines, STEP_DETECTORS) is None:
        return None

    rows: list[StepRow] = []
    for line in lines:
        match = STEP_NUMBER_PATTERN.match(line)
        instruction = match.group(2).strip() if match else line

        if is_step_header(instruction):
            rows.append(StepRow(number="", instruction=instruction, is_header=True))
        elif match:
            rows.append(StepRow(number=match.group(1), instruction=instruction))
    return rows or None
