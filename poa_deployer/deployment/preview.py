"""
Deployment Preview Tool — Build and inspect a deployment without sending it.

Seeds a wizard state from a template, applies discovery answers and the
organization's identity, validates it and prints the roles, permission
bitmaps, voting classes and the blueprint summary that would be handed to
the deployment call.

Usage:
    python -m poa_deployer.deployment.preview --template worker-coop --name "Bike Coop" \\
        --description "A worker-owned repair shop"
    python -m poa_deployer.deployment.preview --template worker-coop --answer group_size=small \\
        --answer trust_level=high --registry 0x... --verbose
    python -m poa_deployer.deployment.preview --list
"""

from __future__ import annotations

import argparse
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from poa_deployer.config import settings
from poa_deployer.deployment.encoding import ZERO_ADDRESS
from poa_deployer.governance.bitmap import format_bitmap_binary, permissions_to_bitmaps
from poa_deployer.governance.philosophy import describe_voting_setup, philosophy_info, voting_to_slider
from poa_deployer.schema.errors import CoreError
from poa_deployer.schema.state import PERMISSION_KEYS, VotingStrategy
from poa_deployer.session import DeployerSession, configure_logging
from poa_deployer.templates.registry import list_templates
from poa_deployer.wizard import actions
from poa_deployer.wizard.selectors import (
    class_participation_counts,
    matched_variation,
    power_bundle_summary,
    role_join_method,
)

console = Console()


def _parse_answers(pairs: list[str]) -> dict[str, str]:
    answers: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Expected key=value, got {pair!r}")
        answers[key.strip()] = value.strip()
    return answers


def print_templates() -> None:
    table = Table(title="Templates")
    table.add_column("Id", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Questions", justify="right")
    table.add_column("Variations", justify="right")
    for template in list_templates():
        table.add_row(
            template.id,
            template.name,
            str(len(template.discovery_questions)),
            str(len(template.variations)),
        )
    console.print(table)


def _print_roles(session: DeployerSession) -> None:
    state = session.state
    summaries = {s.role_index: s.bundles for s in power_bundle_summary(state)}
    table = Table(title="Roles", show_lines=False)
    table.add_column("#", style="cyan", width=3)
    table.add_column("Name", style="green")
    table.add_column("Reports to", style="yellow")
    table.add_column("Joins by")
    table.add_column("Powers", style="dim")
    table.add_column("Supply", justify="right")
    for index, role in enumerate(state.roles):
        admin = role.admin_index
        table.add_row(
            str(index),
            role.name,
            state.roles[admin].name if admin is not None and 0 <= admin < len(state.roles) else "—",
            role_join_method(state, index).value,
            ", ".join(b.value for b in summaries.get(index, [])) or "—",
            str(role.hat_config.max_supply),
        )
    console.print(table)


def _print_permissions(session: DeployerSession) -> None:
    state = session.state
    bitmaps = permissions_to_bitmaps(state.permissions)
    table = Table(title="Permission bitmaps")
    table.add_column("Permission", style="cyan")
    table.add_column("Roles", style="green")
    table.add_column("Bitmap", style="dim")
    for key in PERMISSION_KEYS:
        names = [state.roles[i].name for i in state.permissions[key] if i < len(state.roles)]
        table.add_row(
            key.value,
            ", ".join(names) or "—",
            format_bitmap_binary(bitmaps[f"{key.value}Bitmap"], len(state.roles)),
        )
    console.print(table)


def _print_voting(session: DeployerSession) -> None:
    state = session.state
    slider = voting_to_slider(state.voting)
    console.print(
        f"  Voting: [bold]{state.voting.mode.value}[/bold] "
        f"({philosophy_info(slider).name}, slider {slider}) "
        f"quorum {state.voting.hybrid_quorum}%/{state.voting.dd_quorum}%"
    )
    console.print(f"  [dim]{describe_voting_setup(state.voting)}[/dim]")
    table = Table(title="Voting classes")
    table.add_column("#", style="cyan", width=3)
    table.add_column("Strategy", style="green")
    table.add_column("Slice", justify="right")
    table.add_column("Quadratic")
    table.add_column("Roles", justify="right")
    counts = class_participation_counts(state)
    for index, voting_class in enumerate(state.voting.classes):
        table.add_row(
            str(index),
            "Direct" if voting_class.strategy is VotingStrategy.DIRECT else "Token balance",
            f"{voting_class.slice_pct}%",
            "yes" if voting_class.quadratic else "no",
            str(counts[index]),
        )
    console.print(table)


def run_preview(
    template_id: str,
    name: str,
    description: str,
    answers: dict[str, str] | None = None,
    deployer_address: str = ZERO_ADDRESS,
    registry_address: str | None = None,
    verbose: bool = False,
) -> bool:
    """
    Build a deployment for a template and print what it would contain.

    Args:
        template_id: Registry id of the template to start from.
        name: Organization name.
        description: Organization description.
        answers: Discovery answers, question id → option value.
        deployer_address: Address shown as the deployer.
        registry_address: Registry contract address (defaults to settings).
        verbose: Also print permission bitmaps and voting classes.

    Returns:
        True if the state validates and the blueprint builds.
    """
    console.print("\n[bold blue]═══ Deployment Preview ═══[/bold blue]\n")

    session = DeployerSession()
    session.dispatch(actions.select_template(template_id))
    if session.state.organization.template_id != template_id:
        console.print(f"[bold red]✗ Unknown template:[/bold red] {template_id}")
        return False
    for question_id, value in (answers or {}).items():
        session.dispatch(actions.set_discovery_answer(question_id, value))
    session.dispatch(actions.apply_variation())
    session.dispatch(actions.update_organization(name=name, description=description))

    variation = matched_variation(session.state)
    console.print(f"  Template: [bold]{template_id}[/bold]")
    console.print(f"  Variation: [bold]{variation.name if variation else 'default'}[/bold]")
    _print_roles(session)
    if verbose:
        _print_permissions(session)
        _print_voting(session)

    report = session.validate()
    if not report.ok:
        console.print(f"[bold red]✗ INVALID[/bold red] ({len(report.errors)} issue(s))")
        for issue in report.errors:
            console.print(f"  • [yellow]{issue.path or issue.kind.value}[/yellow]: {escape(issue.message)}")
        return False

    try:
        config = session.build_deployment_config(deployer_address, registry_address)
    except CoreError as exc:
        detail = escape(f"[{exc.kind.value}] {exc.message}")
        console.print(f"[bold red]✗ Blueprint failed:[/bold red] {detail}")
        return False

    summary = config.summary
    console.print("[bold green]✓ READY[/bold green]")
    console.print(f"  Org id: {config.params.org_id.hex()}")
    console.print(f"  Roles ({summary.role_count}): {', '.join(summary.role_names)}")
    console.print(f"  Voting: {summary.voting_mode}, {summary.voting_class_count} class(es)")
    console.print(f"  Vouching: {'yes' if summary.has_vouching else 'no'}")
    console.print("\n[bold blue]═══ Preview Complete ═══[/bold blue]\n")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="POA deployment preview")
    parser.add_argument("--list", action="store_true", help="List available templates and exit")
    parser.add_argument(
        "--template",
        default=settings.default_template,
        help="Template id (defaults to .env settings)",
    )
    parser.add_argument("--name", default="My Organization", help="Organization name")
    parser.add_argument(
        "--description",
        default="An organization configured from the command line",
        help="Organization description",
    )
    parser.add_argument(
        "--answer",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Discovery answer, repeatable",
    )
    parser.add_argument("--deployer", default=ZERO_ADDRESS, help="Deployer address")
    parser.add_argument(
        "--registry",
        default=None,
        help="Registry contract address (defaults to .env settings)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show permission bitmaps and voting classes",
    )
    args = parser.parse_args()

    configure_logging()
    if args.list:
        print_templates()
        sys.exit(0)
    try:
        answers = _parse_answers(args.answer)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    ok = run_preview(
        args.template,
        args.name,
        args.description,
        answers=answers,
        deployer_address=args.deployer,
        registry_address=args.registry,
        verbose=args.verbose,
    )
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
