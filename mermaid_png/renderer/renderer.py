"""Render a single Mermaid diagram to an image file via headless Chromium."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from string import Template

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from mermaid_png.config.models import RenderConfig
from mermaid_png.errors import (
    DimensionError,
    ElementNotFoundError,
    PersistenceError,
    RenderEngineError,
    RenderError,
    RenderTimeoutError,
)
from mermaid_png.renderer.models import BoundingBox, RenderSpec
from mermaid_png.renderer.session import RenderSession

logger = logging.getLogger(__name__)

DIAGRAM_SELECTOR = "#diagram"
PROCESSED_SELECTOR = '.mermaid[data-processed="true"]'
DONE_EXPRESSION = "window.renderComplete || window.renderError"

# renderComplete/renderError are the only signals read back from the page.
_PAGE_TEMPLATE = Template("""\
<!DOCTYPE html>
<html>
  <head>
    <script src="$mermaid_url"></script>
    <script>
      window.renderComplete = false;
      window.renderError = null;
      mermaid.initialize($mermaid_config);
      window.addEventListener('load', async () => {
        try {
          await mermaid.run();
          window.renderComplete = true;
        } catch (error) {
          window.renderError = (error && error.message) || 'Unknown error';
          console.error('Mermaid render error:', error);
        }
      });
    </script>
    <style>
      body {
        margin: 0;
        padding: 20px;
        background: white;
        display: flex;
        justify-content: center;
        align-items: center;
        min-height: 100vh;
      }
      #diagram {
        background: white;
        max-width: 2000px;
        max-height: 2000px;
      }
    </style>
  </head>
  <body>
    <div id="diagram" class="mermaid">
$source
    </div>
  </body>
</html>
""")


def build_page_html(source: str, config: RenderConfig) -> str:
    """HTML shell that loads Mermaid and renders *source* on page load."""
    mermaid_config = {
        "startOnLoad": False,
        "theme": config.theme,
        "themeVariables": config.theme_variables,
        "securityLevel": config.security_level,
    }
    return _PAGE_TEMPLATE.substitute(
        mermaid_url=config.mermaid_url,
        mermaid_config=json.dumps(mermaid_config),
        source=source,
    )


class MermaidRenderer:
    """Turns Mermaid source into a tightly cropped screenshot.

    Renders run one page per call on the browser owned by *session*.
    """

    def __init__(self, session: RenderSession, config: RenderConfig | None = None) -> None:
        self.session = session
        self.config = config or RenderConfig()

    async def render(self, spec: RenderSpec) -> Path:
        """Render ``spec.diagram_source`` to ``spec.output_path``.

        Raises a RenderError subclass if the page never settles, Mermaid
        reports an error, the browser fails, or the diagram cannot be
        measured. A failed image write raises PersistenceError.
        """
        if spec.verbose:
            logger.info(
                "Processing diagram of length: %d characters", len(spec.diagram_source)
            )
            logger.info("First 100 chars: %s...", spec.diagram_source[:100])

        output_path = Path(spec.output_path)
        try:
            async with self.session.page(spec.scale) as page:
                await self._render_on_page(page, spec, output_path)
        except PlaywrightTimeoutError as e:
            raise RenderTimeoutError(f"Browser operation timed out: {e}") from e
        except PlaywrightError as e:
            raise RenderError(f"Browser error while rendering: {e}") from e

        logger.debug("rendered %s", output_path)
        return output_path

    async def _render_on_page(self, page: Page, spec: RenderSpec, output_path: Path) -> None:
        if spec.verbose:
            _attach_diagnostics(page)

        html = build_page_html(spec.diagram_source, self.config)
        try:
            await page.set_content(html, wait_until="networkidle")
        except PlaywrightTimeoutError as e:
            raise RenderTimeoutError(f"Timed out loading render page: {e}") from e

        await self._wait_for_render(page)
        box = await self._measure(page)

        screenshot_kwargs: dict = {
            "path": str(output_path),
            "type": spec.format,
            "clip": box.expanded(self.config.clip_margin).as_clip(),
        }
        if spec.format == "jpeg":
            screenshot_kwargs["quality"] = spec.quality
        try:
            await page.screenshot(**screenshot_kwargs)
        except OSError as e:
            raise PersistenceError(output_path, e) from e

    async def _wait_for_render(self, page: Page) -> None:
        try:
            await page.wait_for_function(
                DONE_EXPRESSION, timeout=self.config.render_timeout_ms
            )
        except PlaywrightTimeoutError as e:
            raise RenderTimeoutError(
                f"Diagram did not finish rendering within {self.config.render_timeout_ms} ms"
            ) from e

        render_error = await page.evaluate("window.renderError")
        if render_error:
            raise RenderEngineError(str(render_error))

        try:
            await page.wait_for_selector(
                PROCESSED_SELECTOR, timeout=self.config.settle_timeout_ms
            )
        except PlaywrightTimeoutError as e:
            raise RenderTimeoutError(
                f"Diagram was not marked processed within {self.config.settle_timeout_ms} ms"
            ) from e

    async def _measure(self, page: Page) -> BoundingBox:
        element = await page.query_selector(DIAGRAM_SELECTOR)
        if element is None:
            raise ElementNotFoundError("Failed to find diagram element")

        raw_box = await element.bounding_box()
        if raw_box is None:
            raise DimensionError("Failed to get diagram dimensions")
        return BoundingBox(**raw_box)


def _attach_diagnostics(page: Page) -> None:
    """Forward browser console output and uncaught errors to the log."""
    page.on("console", lambda msg: logger.info("[Browser %s]: %s", msg.type, msg.text))
    page.on("pageerror", lambda error: logger.error("[Page Error]: %s", error))
