"""Flask CLI commands for Hisab."""

from __future__ import annotations

import click
from flask import current_app


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    def _owner(username: str | None):
        from .extensions import get_session_factory
        from .services.owners import ensure_owner

        config = current_app.config["HISAB_CONFIG"]
        return ensure_owner(get_session_factory(), username or config.DEFAULT_OWNER)

    @app.cli.command("hisab-provision")
    @click.option("--username", default=None, help="Owner to provision (defaults to HISAB_DEFAULT_OWNER)")
    def hisab_provision(username: str | None) -> None:
        """Create the owner if needed and provision every payment method."""

        owner = _owner(username)
        click.echo(f"Owner {owner.username} (id={owner.id}) provisioned.")

    @app.cli.command("hisab-reconcile")
    @click.option("--username", default=None, help="Owner to check (defaults to HISAB_DEFAULT_OWNER)")
    @click.option("--apply", "apply_changes", is_flag=True, default=False, help="Overwrite drifted balances")
    def hisab_reconcile(username: str | None, apply_changes: bool) -> None:
        """Compare cached balances with a recompute from transaction history."""

        from .extensions import get_session_factory
        from .services.ledger import reconcile_balances

        owner = _owner(username)
        drifts = reconcile_balances(get_session_factory(), owner.id, apply=apply_changes)
        if not drifts:
            click.echo("All balances match transaction history.")
            return

        for item in drifts:
            cached = "missing" if item.cached is None else f"{item.cached:,.2f}"
            click.echo(f"{item.name.value}: cached {cached}, expected {item.expected:,.2f}")
        if apply_changes:
            click.echo(f"Reconciled {len(drifts)} payment method(s).")
        else:
            click.echo("Run again with --apply to overwrite cached balances.")
