"""Command-line entry point: run one of the shopmesh processes under uvicorn."""

from typing import Annotated

import typer
import uvicorn

from shopmesh.config import get_settings
from shopmesh.core.domain_types import ServiceName

app = typer.Typer(name="shopmesh", help="Gateway, users and orders services.")


@app.command()
def run(
    service: Annotated[ServiceName, typer.Argument(help="Process to start")],
    host: Annotated[str | None, typer.Option(help="HTTP bind host")] = None,
    port: Annotated[int | None, typer.Option(help="HTTP port")] = None,
    grpc_port: Annotated[
        int | None, typer.Option("--grpc-port", help="gRPC port (users/orders)"),
    ] = None,
) -> None:
    """Start SERVICE with HTTP (and gRPC for users/orders)."""
    settings = get_settings()
    overrides = {"service_name": service}
    if grpc_port is not None:
        overrides["grpc_port"] = grpc_port
    settings = settings.model_copy(update=overrides)

    from shopmesh.main import create_app

    uvicorn.run(
        create_app(settings),
        host=host or settings.http_host,
        port=port or settings.http_port,
        log_config=None,
    )


@app.command()
def config() -> None:
    """Print the effective settings (secrets included; do not share the output)."""
    for key, value in get_settings().model_dump().items():
        typer.echo(f"{key}={value}")


if __name__ == "__main__":
    app()
