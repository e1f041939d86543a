import click

from coursehub_backend.database import get_engine
from coursehub_backend.model import Base

@click.command()
def init_db():
    """Create all tables in the configured database."""
    engine = get_engine()
    Base.metadata.create_all(engine)
    click.echo(f"Schema created on {engine.url.render_as_string(hide_password=True)}")
