"""Pipeline tools for the content scoring system."""

from .render_tool import RenderPool, fetch_page, render_tool
from .parse_tool import parse_tool
from .validate_tool import validate_tool
from .score_tool import score_tool
from .storage_tool import init_storage, load_leaderboard, storage_tool, store_result
from .export_tool import jsonl_to_excel

__all__ = [
    "RenderPool",
    "fetch_page",
    "render_tool",
    "parse_tool",
    "validate_tool",
    "score_tool",
    "init_storage",
    "load_leaderboard",
    "storage_tool",
    "store_result",
    "jsonl_to_excel",
]
