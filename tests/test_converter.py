"""Tests for the conversion orchestrator."""

import pytest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from mermaid_png.config.models import OutputConfig
from mermaid_png.converter import ConversionOptions, convert_markdown_file
from mermaid_png.errors import InputError, PersistenceError, RenderEngineError, RenderTimeoutError
from mermaid_png.renderer import MermaidRenderer


def _renderer(side_effect=None):
    """Fake renderer that writes a small file to each requested path."""
    renderer = MagicMock(spec=MermaidRenderer)

    async def _render(spec):
        Path(spec.output_path).write_bytes(b"\x89PNG fake")
        return Path(spec.output_path)

    renderer.render = AsyncMock(side_effect=side_effect or _render)
    return renderer


def _options(tmp_path, **kwargs):
    return ConversionOptions(output=str(tmp_path / "images"), **kwargs)


TWO_DIAGRAMS = """# Test Document

```mermaid
graph TD
    A[Start] --> B[End]
```

```js
const x = 1;
```

```mermaid
sequenceDiagram
    Alice->>Bob: Hello
```
"""

BROKEN = """# Broken

```mermaid
graph TB
    MS --> >API
    QSN --> SN[Shard N<br/>Videos (N-1)B-NB]
```

```mermaid
graph TD
    A --> B
```
"""


class TestConvertMarkdownFile:
    @pytest.mark.asyncio
    async def test_single_diagram(self, markdown_file, tmp_path):
        renderer = _renderer()
        result = await convert_markdown_file(markdown_file, _options(tmp_path), renderer)

        assert result.converted_count == 1
        output = Path(result.output_file)
        assert output == tmp_path / "test-converted.md"
        assert output.read_text() == (
            "# Test Document\n\nHere is a flowchart:\n\n"
            "![Mermaid Diagram 1](images/test-diagram-1.png)\n\nSome more text."
        )
        image = tmp_path / "images" / "test-diagram-1.png"
        assert result.image_files == [str(image)]
        assert image.stat().st_size > 0

    @pytest.mark.asyncio
    async def test_multiple_diagrams_keep_other_fences(self, tmp_path):
        doc = tmp_path / "multi.md"
        doc.write_text(TWO_DIAGRAMS)
        renderer = _renderer()
        result = await convert_markdown_file(doc, _options(tmp_path, format="jpeg", quality=60), renderer)

        assert result.converted_count == 2
        text = Path(result.output_file).read_text()
        assert "![Mermaid Diagram 1](images/multi-diagram-1.jpeg)" in text
        assert "![Mermaid Diagram 2](images/multi-diagram-2.jpeg)" in text
        assert "```js\nconst x = 1;\n```" in text
        assert "```mermaid" not in text

        specs = [c.args[0] for c in renderer.render.await_args_list]
        assert [s.diagram_source.split("\n")[0] for s in specs] == ["graph TD", "sequenceDiagram"]
        assert all(s.format == "jpeg" and s.quality == 60 and s.scale == 2.0 for s in specs)

    @pytest.mark.asyncio
    async def test_creates_nested_output_directory(self, markdown_file, tmp_path):
        options = ConversionOptions(output=str(tmp_path / "a" / "b" / "c"))
        await convert_markdown_file(markdown_file, options, _renderer())
        assert (tmp_path / "a" / "b" / "c" / "test-diagram-1.png").is_file()

    @pytest.mark.asyncio
    async def test_no_diagrams_raises(self, tmp_path):
        doc = tmp_path / "plain.md"
        doc.write_text("# Nothing here\n\n```python\nx = 1\n```\n")
        renderer = _renderer()
        with pytest.raises(InputError, match="No Mermaid diagrams found"):
            await convert_markdown_file(doc, _options(tmp_path), renderer)
        renderer.render.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_render_failure_aborts_without_writing(self, tmp_path):
        doc = tmp_path / "multi.md"
        doc.write_text(TWO_DIAGRAMS)
        renderer = _renderer(side_effect=RenderEngineError("bad syntax"))
        with pytest.raises(RenderEngineError):
            await convert_markdown_file(doc, _options(tmp_path), renderer)
        assert renderer.render.await_count == 1
        assert not (tmp_path / "multi-converted.md").exists()

    @pytest.mark.asyncio
    async def test_timeout_propagates(self, markdown_file, tmp_path):
        renderer = _renderer(side_effect=RenderTimeoutError("slow"))
        with pytest.raises(RenderTimeoutError):
            await convert_markdown_file(markdown_file, _options(tmp_path), renderer)

    @pytest.mark.asyncio
    async def test_write_failure_is_persistence_error(self, markdown_file, tmp_path):
        # A directory where the output file should go makes write_text fail.
        (tmp_path / "test-converted.md").mkdir()
        with pytest.raises(PersistenceError) as exc_info:
            await convert_markdown_file(markdown_file, _options(tmp_path), _renderer())
        assert exc_info.value.path == str(tmp_path / "test-converted.md")
        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.asyncio
    async def test_validate_only_reports_and_skips_render(self, tmp_path):
        doc = tmp_path / "broken.md"
        doc.write_text(BROKEN)
        renderer = _renderer()
        result = await convert_markdown_file(doc, _options(tmp_path, validate_only=True), renderer)

        renderer.render.assert_not_awaited()
        assert result.output_file is None
        assert result.converted_count == 0
        assert "Malformed arrow syntax detected" in result.issues[1]
        assert 2 not in result.issues
        assert result.issue_count == len(result.issues[1])
        assert not (tmp_path / "images").exists()

    @pytest.mark.asyncio
    async def test_auto_fix_renders_patched_source(self, tmp_path):
        doc = tmp_path / "broken.md"
        doc.write_text(BROKEN)
        renderer = _renderer()
        result = await convert_markdown_file(doc, _options(tmp_path, auto_fix=True), renderer)

        first_spec = renderer.render.await_args_list[0].args[0]
        assert "MS --> API" in first_spec.diagram_source
        assert "Videos N to 1B to NB" in first_spec.diagram_source
        assert 1 in result.fixes and 2 not in result.fixes

        fixed_file = Path(result.fixed_file)
        assert fixed_file == tmp_path / "broken-fixed.md"
        fixed_text = fixed_file.read_text()
        assert "MS --> API" in fixed_text
        assert "graph TD\n    A --> B" in fixed_text
        # the input itself is left alone
        assert doc.read_text() == BROKEN

        converted = Path(result.output_file).read_text()
        assert converted.count("![Mermaid Diagram") == 2

    @pytest.mark.asyncio
    async def test_auto_fix_without_changes_writes_no_fixed_file(self, markdown_file, tmp_path):
        result = await convert_markdown_file(
            markdown_file, _options(tmp_path, auto_fix=True), _renderer()
        )
        assert result.fixed_file is None
        assert result.fixes == {}
        assert not (tmp_path / "test-fixed.md").exists()

    @pytest.mark.asyncio
    async def test_custom_suffixes(self, markdown_file, tmp_path):
        cfg = OutputConfig(converted_suffix=".out")
        result = await convert_markdown_file(markdown_file, _options(tmp_path), _renderer(), cfg)
        assert result.output_file == str(tmp_path / "test.out.md")

    @pytest.mark.asyncio
    async def test_verbose_forwarded_to_renderer(self, markdown_file, tmp_path):
        renderer = _renderer()
        await convert_markdown_file(markdown_file, _options(tmp_path, verbose=True), renderer)
        assert renderer.render.await_args.args[0].verbose is True
