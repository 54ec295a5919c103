"""Flask CLI commands for Budget Assistant."""

from __future__ import annotations

import click


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("budget-assistant-init-db")
    def budget_assistant_init_db() -> None:
        """Create the user and expense schemas."""

        from .extensions import get_engines
        from .infra.database import init_database

        engines = get_engines()
        init_database(engines)
        click.echo(f"User database ready: {engines.user.url}")
        click.echo(f"Expense database ready: {engines.expense.url}")

    @app.cli.command("budget-assistant-create-user")
    @click.option("--username", required=True, help="Login name")
    @click.option("--password", required=True, help="Initial password (6+ characters)")
    @click.option("--email", default=None, help="Optional email address")
    @click.option("--display-name", default=None, help="Name shown in the client")
    def budget_assistant_create_user(
        username: str, password: str, email: str | None, display_name: str | None
    ) -> None:
        """Register a user from the shell."""

        from .extensions import get_session_factory
        from .services import auth

        if len(password) < 6:
            raise click.BadParameter("密碼長度至少需要6個字元", param_hint="--password")

        result = auth.register(
            username=username,
            password=password,
            email=email,
            display_name=display_name,
            session_factory=get_session_factory(),
        )
        if not result.success:
            raise click.ClickException(result.message)
        click.echo(f"Created user {result.username} ({result.user_id})")
