from mermaid_png.cli import app

app(prog_name="mermaid-png")
