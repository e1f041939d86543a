import logging
import click
import uvicorn

from .admin import set_role
from .db import init_db

@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)

@click.command()
@click.option("--host", default="0.0.0.0")
@click.option("--port", default=8000, type=int)
@click.option("--reload", is_flag=True)
def serve(host, port, reload):
    """Run the API server."""
    uvicorn.run("coursehub_backend.server:app", host=host, port=port, reload=reload, workers=1)

cli.add_command(init_db,"init-db")
cli.add_command(set_role,"set-role")
cli.add_command(serve,"serve")

if __name__ == '__main__':
    cli()
