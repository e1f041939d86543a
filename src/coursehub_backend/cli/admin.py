import click

from coursehub_backend.database import get_db
from coursehub_backend.model.types import UserRole
from coursehub_backend.permissions.auth import get_credential_service
from coursehub_backend.repositories.user import UserRepository
from coursehub_backend.services.auth_service import AuthService

@click.command()
@click.argument("email")
@click.argument("role", type=click.Choice([role.value for role in UserRole]))
def set_role(email, role):
    """Change the role of the user registered with EMAIL."""

    with next(get_db()) as db:
        user = UserRepository(db).find_by_email(email)
        if user is None:
            raise click.ClickException(f"No user with email {email}")

        previous = user.role.value
        AuthService(db, get_credential_service()).change_role(user.id, UserRole(role), changed_by="cli")

    click.echo(f"{email}: {previous} -> {role}")
