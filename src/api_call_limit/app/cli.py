from __future__ import annotations

import logging
import time
from datetime import date
from pathlib import Path

import httpx
import typer
from pydantic import ValidationError

from .api import DocumentApiClient
from ..core.domain.errors import ApiCallError, ConfigurationError
from ..core.domain.models import DocDescription, Document, Product
from ..infra.json_serializer import JsonDocumentSerializer


app = typer.Typer(help="Rate-limited client for the document creation API")


@app.callback()
def main(verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )


@app.command(help="Create the document described by a JSON file (wire format).")
def send(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Path to the document JSON"),
    token: str | None = typer.Option(None, help="Bearer token (default: API_CALL_LIMIT_AUTH_TOKEN)"),
    url: str | None = typer.Option(None, help="Override the document creation endpoint"),
) -> None:
    try:
        document = JsonDocumentSerializer().load(file)
    except ValidationError as e:
        typer.echo(f"Invalid document {file}: {e}", err=True)
        raise typer.Exit(code=2)
    try:
        with DocumentApiClient(api_url=url) as client:
            resp = client.create_document(document, token)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)
    except ApiCallError as e:
        typer.echo(f"Request failed: {e.cause!r}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"HTTP {resp.status_code}")
    typer.echo(resp.text)


@app.command(help="Submit generated sample documents from many threads through the rate limiter.")
def simulate(
    tasks: int = typer.Option(100, min=1, help="Number of documents to submit"),
    threads: int = typer.Option(30, min=1, help="Worker threads"),
    limit: int = typer.Option(3, help="Requests admitted per window"),
    window: float = typer.Option(1.0, help="Window length in seconds"),
    token: str = typer.Option("token", help="Bearer token sent with every request"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Answer requests locally instead of calling the API"),
) -> None:
    transport = httpx.MockTransport(_dry_run_handler) if dry_run else None
    documents = [sample_document(n) for n in range(1, tasks + 1)]
    start = time.monotonic()
    try:
        with DocumentApiClient(
            request_limit=limit,
            window_seconds=window,
            max_workers=threads,
            http_transport=transport,
        ) as client:
            results = client.submit_documents(documents, token)
    except (ConfigurationError, ValueError) as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)
    elapsed = time.monotonic() - start
    failed = [r for r in results if not r.ok]
    typer.echo(f"Submitted {len(results)} documents in {elapsed:.1f}s ({len(failed)} failed)")
    for r in failed:
        typer.echo(f"  - {r.doc_id}: {r.error.cause!r}", err=True)


def _dry_run_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"value": "dry-run"})


def sample_document(number: int) -> Document:
    today = date.today()
    product = Product(certificate_document_date=today, production_date=today)
    return Document(
        doc_id=str(number),
        description=DocDescription(),
        production_date=today,
        products=(product,),
        reg_date=today,
    )


if __name__ == "__main__":  # pragma: no cover
    app()
