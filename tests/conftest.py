from types import SimpleNamespace

import pytest

from content_scoring.config.loader import Config


PAGE_URL = "https://example.com/guide"

SCENARIO_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<title>Content Planning Guide for Growing Marketing Teams</title>
<meta name="description" content="How editorial teams plan, publish and review content.">
<meta name="viewport" content="width=device-width, initial-scale=1">
<script type="application/ld+json">
{"@context": "https://schema.org", "@type": "FAQPage", "mainEntity": []}
</script>
</head>
<body>
<h1>Content Planning Guide</h1>
<h2>Planning basics</h2>
<p>According to Gartner, 45% of buyers compare vendors online before talking to sales.</p>
<p>A survey by Forrester found that 62% of marketing teams plan content every week.</p>
<h2>Expert views</h2>
<blockquote>
  <p>Consistent planning is the single habit that separates steady publishers from the rest.</p>
  <cite>Jane Miller, Head of Content at Acme</cite>
</blockquote>
<blockquote>
  <p>A shared calendar turns scattered ideas into a publishing rhythm everyone can follow.</p>
  <cite>Omar Haddad, Editorial Director at Northwind</cite>
</blockquote>
<blockquote>
  <p>Good briefs save more editing time than any tool we have ever bought for the team.</p>
  <cite>Lena Fischer, Managing Editor at Contoso</cite>
</blockquote>
<p>Read more on the <a href="/blog">blog</a>.</p>
</body>
</html>
"""


@pytest.fixture
def page_url():
    return PAGE_URL


@pytest.fixture
def scenario_html():
    return SCENARIO_HTML


@pytest.fixture
def config(tmp_path):
    return Config.from_dict(
        {
            "scan_urls": [],
            "render_policy": {"use_browser": False, "max_concurrent_pages": 2},
            "validator": {"enabled": True, "model": "test-model"},
            "output_config": {"storage_path": str(tmp_path / "scans.jsonl")},
            "retry_policy": {"max_attempts": 3, "backoff_seconds": 0},
        }
    )


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClient:
    """Stands in for openai.OpenAI: only chat.completions.create is used."""

    def __init__(self, content=None, error=None):
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)
        self.closed = False

    def close(self):
        self.closed = True


@pytest.fixture
def fake_client():
    return FakeClient
