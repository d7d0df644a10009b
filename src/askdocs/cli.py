"""
Command-line interface for askdocs.

Commands:
    index   - Build the index from document paths read on stdin
    query   - Answer a single question
    serve   - Start the FastAPI server
    version - Show version information
"""

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from askdocs.config import get_settings
from askdocs.errors import AskDocsError

app = typer.Typer(
    name="askdocs",
    help="Question answering over indexed HTML documents",
    add_completion=False,
)
console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)


@app.callback()
def main() -> None:
    """Configure logging from settings before running a command."""
    _configure_logging(get_settings().log_level)


@app.command()
def index(
    policy: Optional[str] = typer.Option(
        None,
        help="On unreadable documents: 'fail' aborts, 'skip' warns and continues",
    ),
    index_path: Optional[str] = typer.Option(None, help="Where to write the index"),
) -> None:
    """Index the document paths passed on stdin, one per line."""
    from askdocs.retrieval.embeddings import OpenAIEmbedder
    from askdocs.retrieval.indexer import read_paths, run_indexing

    settings = get_settings()
    on_error = policy or settings.document_error_policy
    if on_error not in ("fail", "skip"):
        console.print(f"[red]Unknown policy: {on_error}[/red]")
        raise typer.Exit(2)
    target = index_path or settings.index_path

    try:
        embedder = OpenAIEmbedder.from_settings(settings)
        idx = run_indexing(read_paths(sys.stdin), embedder, target, on_error=on_error)
    except AskDocsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Index")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Documents", str(len(idx.documents)))
    table.add_row("Embeddings", str(idx.size))
    table.add_row("Dimension", str(idx.dimension or "-"))
    table.add_row("Output", str(target))
    console.print(table)


@app.command()
def query(
    question: str = typer.Argument(..., help="Question to ask"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show the context chunks"),
) -> None:
    """Answer a single question from the index."""
    from askdocs.qa import answer_query
    from askdocs.retrieval.resources import initialize_resources

    settings = get_settings()

    try:
        resources = initialize_resources(settings)
        with console.status("[bold green]Processing..."):
            answer = answer_query(question, resources, settings.max_context_bytes)
    except AskDocsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"Answer: {answer.text}", markup=False, highlight=False)

    if verbose:
        table = Table(title="Context")
        table.add_column("Distance", style="cyan")
        table.add_column("Document", style="green")
        table.add_column("Chunk", style="green")
        table.add_column("Bytes", style="green")
        for chunk in answer.chunks:
            table.add_row(
                f"{chunk.distance:.4f}",
                chunk.document_path,
                str(chunk.chunk_number),
                str(len(chunk.text.encode("utf-8"))),
            )
        console.print(table)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind"),
    port: Optional[int] = typer.Option(None, help="Port to bind"),
) -> None:
    """Start the FastAPI server."""
    import uvicorn

    settings = get_settings()
    try:
        settings.require_api_key()
    except AskDocsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    host = host or settings.api_host
    port = port or settings.api_port
    console.print(f"[green]Starting askdocs server on {host}:{port}[/green]")

    uvicorn.run("askdocs.api.main:app", host=host, port=port, workers=1)


@app.command()
def version() -> None:
    """Show version information."""
    from askdocs import __version__

    console.print(f"askdocs v{__version__}")


if __name__ == "__main__":
    app()
