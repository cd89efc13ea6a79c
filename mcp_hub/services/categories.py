"""
Keyword-based category heuristic for registry servers.

Rules are checked in order and the first match wins, so a server mentioning
both GitHub and a database lands in "Dev Tools".
"""
import re
from typing import List, Pattern, Tuple

from mcp_hub.schemas.registry import RegistryServer

DEFAULT_CATEGORY = "General"

CATEGORY_RULES: List[Tuple[str, Pattern[str]]] = [
    ("Dev Tools", re.compile(r"github|gitlab|git\b|version control|repository")),
    ("Database", re.compile(r"database|postgres|mysql|sqlite|sql|mongo|redis")),
    ("Web & Search", re.compile(r"search|web|browser|fetch|crawl|scrape")),
    ("Files & Storage", re.compile(r"file|filesystem|storage|s3|blob")),
    ("Productivity", re.compile(r"slack|discord|email|gmail|calendar|notion|linear|jira")),
    ("Cloud & Infra", re.compile(r"aws|azure|gcp|cloud|kubernetes|docker")),
    ("AI & ML", re.compile(r"ai|llm|openai|anthropic|image|vision|audio")),
    ("Finance", re.compile(r"finance|payment|stripe|crypto|blockchain")),
    ("Data & APIs", re.compile(r"map|location|geo|weather")),
    ("Memory", re.compile(r"memory|knowledge|graph")),
]


def classify(server: RegistryServer) -> str:
    """Derive a display category from the server's name and description."""
    text = f"{server.name} {server.description}".lower()
    for label, pattern in CATEGORY_RULES:
        if pattern.search(text):
            return label
    return DEFAULT_CATEGORY


def with_category(server: RegistryServer) -> RegistryServer:
    """Return a copy of the server with its category filled in."""
    return server.model_copy(update={"category": classify(server)})
