import pytest

from mcp_hub.schemas.registry import RegistryServer
from mcp_hub.services.categories import DEFAULT_CATEGORY, classify, with_category


def make_server(name="acme/quux", description=""):
    return RegistryServer(
        id=name,
        name=name,
        description=description,
        created_at="2025-01-01T00:00:00Z",
        updated_at="2025-01-01T00:00:00Z",
    )


@pytest.mark.parametrize("description,expected", [
    ("Manage GitHub issues", "Dev Tools"),
    ("Query Postgres tables", "Database"),
    ("Crawl pages and extract text", "Web & Search"),
    ("Upload objects to S3 buckets", "Files & Storage"),
    ("Send Slack messages", "Productivity"),
    ("Manage Kubernetes clusters", "Cloud & Infra"),
    ("Generate speech from text with OpenAI", "AI & ML"),
    ("Accept Stripe payments", "Finance"),
    ("Current weather conditions", "Data & APIs"),
    ("Persistent knowledge store", "Memory"),
])
def test_each_rule(description, expected):
    assert classify(make_server(description=description)) == expected


def test_first_rule_wins():
    """A text hitting Dev Tools, Database and Web & Search is Dev Tools"""
    assert classify(make_server(description="github database browser")) == "Dev Tools"


def test_database_beats_web():
    assert classify(make_server(description="search your sqlite files")) == "Database"


def test_no_match_is_general():
    assert classify(make_server(description="Converts units of measure.")) == DEFAULT_CATEGORY == "General"


def test_name_is_part_of_the_text():
    assert classify(make_server(name="acme/redis-bridge", description="")) == "Database"


def test_case_insensitive():
    assert classify(make_server(description="NOTION pages")) == "Productivity"


def test_git_needs_word_boundary():
    assert classify(make_server(description="git tools")) == "Dev Tools"
    assert classify(make_server(description="digital signage")) == "General"


def test_deterministic():
    server = make_server(description="Docker containers in the cloud")

    assert {classify(server) for _ in range(5)} == {"Cloud & Infra"}


def test_with_category_returns_copy():
    server = make_server(description="Postgres")

    categorized = with_category(server)

    assert categorized.category == "Database"
    assert server.category is None
    assert categorized.id == server.id
