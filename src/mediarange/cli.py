"""CLI implementation for mediarange."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from . import respond
from .core.config import ResponderConfig
from .core.model import MediaRangeError
from .core.util import descriptor_asdict, error_asdict
from .io import DirectoryResolver, StaticResolver, open_resource
from .wsgi import make_app, serve as serve_app

app = typer.Typer(add_completion=False, help="Serve and inspect byte-range media responses.")


@app.callback()
def main(verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging")):
    """Serve and inspect byte-range media responses."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config() -> ResponderConfig:
    try:
        return ResponderConfig.load()
    except ValueError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def probe(
    source: str = typer.Argument(..., help="File path or URL to answer a request for"),
    range_header: Optional[str] = typer.Option(None, "--range", "-r", help="Range header, e.g. 'bytes=0-499'"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write the response body to PATH"),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", min=1, help="Read size per chunk in bytes"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of keys to emit"),
):
    """Print the response a request for SOURCE would get, optionally saving its body."""
    sel_fields = set(fields.split(",")) if fields else None
    config = _load_config()
    if chunk_size is not None:
        config.chunk_size = chunk_size

    try:
        descriptor = respond(source, range_header, config=config)
        if output:
            with descriptor.body, open(output, "wb") as sink:
                for chunk in descriptor.body:
                    sink.write(chunk)
        else:
            descriptor.body.close()
    except MediaRangeError as e:
        json.dump(error_asdict(e), sys.stdout, indent=2)
        sys.stdout.write("\n")
        raise typer.Exit(code=1)

    json.dump(descriptor_asdict(descriptor, fields=sel_fields), sys.stdout, indent=2)
    sys.stdout.write("\n")


@app.command()
def serve(
    path: str = typer.Argument(..., help="File or directory to serve (or a URL to proxy)"),
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", min=0, max=65535, help="Port to listen on"),
    media_type: Optional[str] = typer.Option(None, "--media-type", help="Content-Type to serve with"),
):
    """Serve PATH over HTTP with single-range support."""
    config = _load_config()
    if media_type:
        config.media_type = media_type

    if Path(path).is_dir():
        resolver = DirectoryResolver(path)
    else:
        resource = open_resource(path)
        try:
            resource.size()
        except MediaRangeError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(code=1)
        resolver = StaticResolver(resource)

    typer.echo(f"Serving {path} on http://{host}:{port}", err=True)
    serve_app(make_app(resolver, config), host=host, port=port)


if __name__ == "__main__":
    app()
