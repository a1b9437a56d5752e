"""Shared test fixtures for mermaid-png."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from mermaid_png.config.models import MermaidPngConfig, RenderConfig
from mermaid_png.renderer.session import RenderSession


SINGLE_DIAGRAM_DOC = """# Test Document

Here is a flowchart:

```mermaid
graph TD
    A[Start] --> B[Process]
    B --> C[End]
```

Some more text."""


@pytest.fixture
def sample_config():
    return MermaidPngConfig()


@pytest.fixture
def render_config():
    return RenderConfig(render_timeout_ms=1000, settle_timeout_ms=500)


@pytest.fixture
def mock_element():
    element = MagicMock()
    element.bounding_box = AsyncMock(
        return_value={"x": 10, "y": 10, "width": 200, "height": 100}
    )
    return element


@pytest.fixture
def mock_page(mock_element):
    page = MagicMock()
    page.set_content = AsyncMock()
    page.wait_for_function = AsyncMock()
    page.evaluate = AsyncMock(return_value=None)
    page.wait_for_selector = AsyncMock()
    page.query_selector = AsyncMock(return_value=mock_element)
    page.screenshot = AsyncMock()
    page.close = AsyncMock()
    return page


@pytest.fixture
def mock_browser(mock_page):
    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=mock_page)
    browser.close = AsyncMock()
    return browser


@pytest.fixture
def mock_playwright(mock_browser):
    """Patch async_playwright so RenderSession launches a fake Chromium."""
    pw = MagicMock()
    pw.chromium.launch = AsyncMock(return_value=mock_browser)
    pw.stop = AsyncMock()
    starter = MagicMock()
    starter.start = AsyncMock(return_value=pw)
    with patch(
        "mermaid_png.renderer.session.async_playwright", return_value=starter
    ) as factory:
        yield factory, pw


@pytest.fixture
def session(mock_playwright, render_config):
    """A fresh session per test so launches never leak between tests."""
    return RenderSession(render_config)


@pytest.fixture
def markdown_file(tmp_path):
    path = tmp_path / "test.md"
    path.write_text(SINGLE_DIAGRAM_DOC, encoding="utf-8")
    return path
