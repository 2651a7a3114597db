"""Helpers for schema.org JSON-LD blocks embedded in recipe pages."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Iterator, Optional

logger = logging.getLogger(__name__)

JSON_LD_PATTERN = re.compile(
    r"<script[^>]+type=[\"']application/ld\+json[\"'][^>]*>([\s\S]*?)</script>",
    re.IGNORECASE,
)
RECIPE_TYPE = "Recipe"

NodePredicate = Callable[[dict], bool]


def is_recipe_node(node: dict) -> bool:
    node_type = node.get("@type")
    if isinstance(node_type, str):
        return node_type == RECIPE_TYPE
    if isinstance(node_type, list):
        return RECIPE_TYPE in node_type
    return False


def find_first(value: Any, predicate: NodePredicate) -> Optional[dict]:
    """Depth-first search for the first object satisfying ``predicate``.

    Objects are tested before their children; ``@graph`` containers are
    visited before the remaining keys. Never raises for unexpected shapes.
    """
    if isinstance(value, list):
        for item in value:
            found = find_first(item, predicate)
            if found is not None:
                return found
        return None

    if not isinstance(value, dict):
        return None

    if predicate(value):
        return value

    graph = value.get("@graph")
    if graph is not None:
        found = find_first(graph, predicate)
        if found is not None:
            return found

    for key, child in value.items():
        if key == "@graph" or not isinstance(child, (dict, list)):
            continue
        found = find_first(child, predicate)
        if found is not None:
            return found
    return None


def iter_json_ld_blocks(html: str) -> Iterator[Any]:
    for match in JSON_LD_PATTERN.finditer(html):
        raw = match.group(1).strip()
        if not raw:
            continue
        try:
            block = json.loads(raw)
        except (ValueError, RecursionError) as error:
            logger.warning("Failed to parse JSON-LD block: %s", error)
            continue
        yield block


def find_recipe_node(html: str) -> Optional[dict]:
    for block in iter_json_ld_blocks(html):
        try:
            recipe = find_first(block, is_recipe_node)
        except RecursionError:
            logger.warning("JSON-LD block too deeply nested, skipping")
            continue
        if recipe is not None:
            return recipe
    return None


def serialize_node(node: dict) -> str:
    return json.dumps(node, ensure_ascii=False, separators=(",", ":"))
