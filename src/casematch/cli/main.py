"""Command-line interface for casematch.

Provides CLI commands for searching, scanning and reconciling a registry.
"""

import importlib.metadata
import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from casematch.engine import RegistryConfig
from casematch.errors import CaseMatchError, OperationCancelled

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("casematch")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development


@contextmanager
def _audit(config: RegistryConfig, stage: str | None = None) -> Iterator:
    """Yield an AuditLogger when an audit log is configured, else None.

    Events logged without an explicit stage are attributed to ``stage``.
    """
    if config.audit_log_path is None:
        yield None
        return

    from casematch.audit import AuditLogger, generate_run_id

    with AuditLogger(generate_run_id(), config.audit_log_path) as audit_logger:
        audit_logger.session_started(sys.argv, config.to_dict())
        audit_logger.set_stage(stage)
        yield audit_logger


def _fail(message: str) -> None:
    click.secho(f"✗ Error: {message}", fg="red", err=True)
    sys.exit(1)


def _confirm(yes: bool):
    if yes:
        return lambda prompt: True
    return lambda prompt: click.confirm(prompt, default=False)


@click.group()
@click.version_option(version=__version__, prog_name="casematch")
@click.option(
    "--db",
    type=click.Path(dir_okay=False),
    default="casematch.db",
    envvar="CASEMATCH_DB",
    show_default=True,
    help="SQLite registry file",
)
@click.option(
    "--audit-log",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="CASEMATCH_AUDIT_LOG",
    help="Append reconciliation events to this JSONL file",
)
@click.pass_context
def cli(ctx: click.Context, db: str, audit_log: str | None) -> None:
    """Find, review and reconcile duplicate clients in an outreach registry.

    Use 'casematch COMMAND --help' for command-specific help.
    """
    ctx.obj = RegistryConfig(
        db_path=Path(db),
        audit_log_path=Path(audit_log) if audit_log else None,
    )


@cli.command("init-db")
@click.pass_obj
def init_db(config: RegistryConfig) -> None:
    """Create the registry database and its tables."""
    from casematch.api import open_store

    try:
        open_store(config=config).close()
    except CaseMatchError as e:
        _fail(str(e))

    click.secho(f"✓ Registry ready at {config.db_path}", fg="green")


@cli.command()
@click.argument("clients_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--encounters",
    "encounters_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Encounter JSONL file",
)
@click.pass_obj
def load(config: RegistryConfig, clients_path: str, encounters_path: str | None) -> None:
    """Load clients (and encounters) from JSONL files.

    Examples
    --------
        casematch load clients.jsonl --encounters encounters.jsonl
    """
    from casematch.api import open_store
    from casematch.store import load_jsonl

    try:
        with open_store(config=config) as store:
            n_clients, n_encounters = load_jsonl(
                store,
                Path(clients_path),
                Path(encounters_path) if encounters_path else None,
            )
    except (CaseMatchError, ValueError, KeyError) as e:
        _fail(str(e))

    click.secho(f"✓ Loaded {n_clients} clients and {n_encounters} encounters", fg="green")


@cli.command()
@click.argument("query", required=False, default="")
@click.option("--limit", type=int, default=None, help="Maximum results (default: 50)")
@click.option(
    "--view",
    type=click.Choice(["all", "active", "inactive", "exited"]),
    default="all",
    show_default=True,
    help="Engagement-status view",
)
@click.pass_obj
def search(config: RegistryConfig, query: str, limit: int | None, view: str) -> None:
    """Search clients by name, alias, nickname or client code.

    Without QUERY, lists the most recently contacted clients.

    Examples
    --------
        casematch search "jon smith"
        casematch search --view active
    """
    from casematch.api import open_store, search_clients

    if limit is not None:
        config.search_limit = limit

    try:
        config.search_config()
        with open_store(config=config) as store:
            results = search_clients(store, query, config, view=view)
    except (CaseMatchError, ValueError) as e:
        _fail(str(e))

    for record, score in results:
        last_contact = record.last_contact.isoformat() if record.last_contact else "-"
        dob = record.date_of_birth.isoformat() if record.date_of_birth else "-"
        click.echo(
            f"{record.client_code}\t{record.full_name}\tdob={dob}\t"
            f"last={last_contact}\tscore={score:.3f}\t{record.id}"
        )

    if not results:
        click.echo("No matching clients", err=True)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print groups as JSON")
@click.pass_obj
def scan(config: RegistryConfig, as_json: bool) -> None:
    """Scan the registry for duplicate groups."""
    from casematch.api import find_duplicates, open_store
    from casematch.clustering import find_partial_reconciliations

    try:
        with open_store(config=config) as store, _audit(config, "scan") as audit_logger:
            n_clients = len(store.fetch_all_clients())
            groups = find_duplicates(store, config)
            if audit_logger is not None:
                audit_logger.scan_completed(
                    n_clients, len(groups), sum(len(g.members) for g in groups)
                )
    except CaseMatchError as e:
        _fail(str(e))

    if as_json:
        click.echo(json.dumps([g.to_dict() for g in groups], indent=2, ensure_ascii=False))
        return

    for group in groups:
        click.echo(f"{group.group_id} ({len(group.members)} clients)")
        for member in group.members:
            client = member.client
            dob = client.date_of_birth.isoformat() if client.date_of_birth else "-"
            click.echo(
                f"  {client.id}\t{client.full_name}\tdob={dob}\t"
                f"encounters={member.encounter_count}\tscore={member.score:.3f}"
            )

    for member in find_partial_reconciliations(groups):
        click.secho(
            f"! {member.client.id} owns no encounters; possible interrupted merge",
            fg="yellow",
            err=True,
        )

    click.secho(f"✓ Found {len(groups)} duplicate groups", fg="green")


@cli.command()
@click.argument("first_name")
@click.argument("last_name")
@click.option("--dob", default=None, help="Date of birth (YYYY-MM-DD)")
@click.pass_obj
def check(config: RegistryConfig, first_name: str, last_name: str, dob: str | None) -> None:
    """Check whether a new client may already be registered.

    Examples
    --------
        casematch check Rob Jones --dob 1980-03-14
    """
    from casematch.api import check_intake, open_store

    try:
        with open_store(config=config) as store, _audit(config, "intake") as audit_logger:
            try:
                result = check_intake(store, first_name, last_name, dob, config)
            except ValueError as e:
                if audit_logger is not None:
                    audit_logger.error(type(e).__name__, str(e), data={"date_of_birth": dob})
                raise
    except (CaseMatchError, ValueError) as e:
        _fail(str(e))

    if not result.has_potential_duplicates:
        click.secho("✓ No potential duplicates", fg="green")
        return

    click.secho(f"{len(result.matches)} potential duplicate(s):", fg="yellow")
    for match in result.matches:
        client = match.client
        last_seen = match.last_encounter_date.isoformat() if match.last_encounter_date else "-"
        click.echo(
            f"  {client.id}\t{client.full_name}\tscore={match.similarity_score:.3f}\t"
            f"last_encounter={last_seen}"
        )


@cli.command()
@click.argument("keep_id")
@click.argument("drop_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def merge(config: RegistryConfig, keep_id: str, drop_id: str, yes: bool) -> None:
    """Move all encounters of DROP_ID to KEEP_ID and delete DROP_ID."""
    from casematch.api import make_reconciler, open_store

    try:
        with open_store(config=config) as store, _audit(config, "reconcile") as audit_logger:
            reconciler = make_reconciler(store, audit_logger, confirm=_confirm(yes))
            outcome = reconciler.merge(keep_id, drop_id)
    except OperationCancelled:
        click.echo("Aborted.", err=True)
        sys.exit(1)
    except CaseMatchError as e:
        _fail(str(e))

    click.secho(
        f"✓ Merged {drop_id} into {keep_id} ({outcome.encounters_affected} encounters moved)",
        fg="green",
    )


@cli.command()
@click.argument("client_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def delete(config: RegistryConfig, client_id: str, yes: bool) -> None:
    """Delete CLIENT_ID and all of its encounters."""
    from casematch.api import make_reconciler, open_store

    try:
        with open_store(config=config) as store, _audit(config, "reconcile") as audit_logger:
            reconciler = make_reconciler(store, audit_logger, confirm=_confirm(yes))
            outcome = reconciler.delete(client_id)
    except OperationCancelled:
        click.echo("Aborted.", err=True)
        sys.exit(1)
    except CaseMatchError as e:
        _fail(str(e))

    click.secho(
        f"✓ Deleted {client_id} ({outcome.encounters_affected} encounters)",
        fg="green",
    )


if __name__ == "__main__":
    cli()
