"""JSON-LD detection. Each block is parsed on its own; a bad block is skipped."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

FAQ_SCHEMA_TYPE = "FAQPage"


@dataclass
class StructuredData:
    types: list[str] = field(default_factory=list)
    blocks: int = 0
    invalid_blocks: int = 0

    @property
    def has_schema(self) -> bool:
        return bool(self.types)

    @property
    def faq_schema(self) -> bool:
        return FAQ_SCHEMA_TYPE in self.types


def _types_of(node: Any) -> list[str]:
    """@type values of a node, its @graph members, or each member of a top-level array."""
    found: list[str] = []
    if isinstance(node, list):
        for item in node:
            found.extend(_types_of(item))
        return found
    if not isinstance(node, dict):
        return found
    raw = node.get("@type")
    if isinstance(raw, str):
        found.append(raw)
    elif isinstance(raw, list):
        found.extend(t for t in raw if isinstance(t, str))
    graph = node.get("@graph")
    if isinstance(graph, list):
        for item in graph:
            found.extend(_types_of(item))
    return found


def extract_structured_data(soup: BeautifulSoup) -> StructuredData:
    result = StructuredData()
    seen: set[str] = set()
    for script in soup.find_all("script", type="application/ld+json"):
        result.blocks += 1
        raw = script.string or script.get_text() or ""
        if not raw.strip():
            continue
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, ValueError) as e:
            result.invalid_blocks += 1
            logger.debug("Skipping malformed JSON-LD block: %s", e)
            continue
        for type_name in _types_of(data):
            type_name = type_name.strip()
            if type_name and type_name not in seen:
                seen.add(type_name)
                result.types.append(type_name)
    return result
