import click
from flask import current_app

from safecity.services import user_service


def register_commands(app):

    @app.cli.command("create-admin")
    @click.argument("email", required=False)
    @click.argument("password", required=False)
    def create_admin(email, password):
        """Create (or promote) the admin account. Falls back to ADMIN_EMAIL / ADMIN_PASSWORD."""
        email = email or current_app.config.get("ADMIN_EMAIL")
        password = password or current_app.config.get("ADMIN_PASSWORD")
        if not email or not password:
            raise click.UsageError("ADMIN_EMAIL or ADMIN_PASSWORD not set")

        user = user_service.ensure_admin(email, password)
        click.echo(f"Admin user ensured: {user.email}")
