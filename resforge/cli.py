"""Thin CLI wrapper for resforge.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from resforge import __version__
from resforge.config import (
    DEFAULT_AGGREGATE_TARGET,
    Settings,
    get_settings,
    print_settings_json,
)
from resforge.types import RunStatus, TargetState

if TYPE_CHECKING:
    from resforge.builds.graph import DependencyGraph
    from resforge.builds.models import BuildTarget
    from resforge.release.bundle import ReleaseBundle
    from resforge.release.github import GitHubReleaseClient

app = typer.Typer(
    name="resforge",
    help="resforge - build e2e driver and contract resources, publish nightly releases",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"resforge version {__version__}")
        raise typer.Exit()


def print_json(data: object) -> None:
    """Print JSON without rich wrapping or markup."""
    console.print(json.dumps(data, indent=2), soft_wrap=True, markup=False)


def configure_logging(level: str) -> None:
    """Route log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """resforge - build e2e driver and contract resources, publish nightly releases."""
    configure_logging("DEBUG" if verbose else get_settings().log_level)


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings), soft_wrap=True, markup=False)
    else:
        targets_file_display = (
            str(settings.targets_file) if settings.targets_file else "(built-in)"
        )
        timeout_display = (
            str(settings.build_timeout) if settings.build_timeout else "(none)"
        )
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Build:[/bold]")
        console.print(f"  Build root:          {settings.build_root}")
        console.print(f"  Targets file:        {targets_file_display}")
        console.print(f"  Toolchain:           {settings.toolchain}")
        console.print(f"  Build timeout:       {timeout_display}")
        console.print(f"  Log level:           {settings.log_level}")
        console.print()
        console.print("[bold]Release:[/bold]")
        console.print(f"  Dist directory:      {settings.dist_dir}")
        console.print(f"  Contracts directory: {settings.contracts_dir}")
        console.print(f"  API URL:             {settings.github_api_url}")
        console.print(f"  Repository:          {settings.github_repository or '(unset)'}")
        console.print(f"  Token:               {'(set)' if settings.github_token else '(unset)'}")
        console.print(f"  Tag prefix:          {settings.release_tag_prefix}")
        console.print(f"  Keep latest:         {settings.release_keep_latest}")


FileOption = Annotated[
    Path | None,
    typer.Option("--file", "-f", help="Target declaration file (YAML/JSON)"),
]
RootOption = Annotated[
    Path | None,
    typer.Option("--root", "-C", help="Build root directory"),
]
ToolchainOption = Annotated[
    str | None,
    typer.Option("--toolchain", help="Contract toolchain name"),
]


def _load_graph(
    settings: Settings,
    file: Path | None,
    root: Path | None,
    toolchain: str | None,
) -> "DependencyGraph":
    """Load the declaration and build the graph, exiting on config errors."""
    from resforge.errors import ResforgeError
    from resforge.targets.service import build_graph, load_declaration_file

    try:
        declaration = load_declaration_file(file or settings.targets_file)
        return build_graph(
            declaration,
            build_root=root or settings.build_root,
            toolchain=toolchain or settings.toolchain,
        )
    except ResforgeError as e:
        err_console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1) from None


def _default_target(graph: "DependencyGraph") -> str:
    return graph.aggregate_name or DEFAULT_AGGREGATE_TARGET


@app.command()
def build(
    target: Annotated[
        str | None,
        typer.Argument(help="Target to build (default: the aggregate target)"),
    ] = None,
    file: FileOption = None,
    root: RootOption = None,
    toolchain: ToolchainOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-B", help="Rebuild even if artifacts exist"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Show what would be built"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Build a target and its prerequisites (default: the aggregate target)."""
    from resforge.builds.scheduler import plan_build, run_build
    from resforge.errors import ResforgeError

    settings = get_settings()
    graph = _load_graph(settings, file, root, toolchain)
    target = target or _default_target(graph)

    if dry_run:
        try:
            plan = plan_build(graph, target, force=force)
        except ResforgeError as e:
            err_console.print(f"[red]Configuration error: {e}[/red]")
            raise typer.Exit(code=1) from None
        if json_output:
            output = [
                {"target": p.target.name, "will_run": p.will_run} for p in plan
            ]
            print_json(output)
        else:
            for p in plan:
                marker = "[yellow]would build[/yellow]" if p.will_run else "[dim]up to date[/dim]"
                console.print(f"  {p.target.name}: {marker}")
        return

    def report(build_target: "BuildTarget", state: TargetState) -> None:
        if json_output:
            return
        if state == TargetState.SKIPPED:
            console.print(f"[dim]= {build_target.name} (up to date)[/dim]")
        elif state == TargetState.RUNNING:
            console.print(f"[blue]> {build_target.name}[/blue]")
        elif state == TargetState.SUCCEEDED:
            console.print(f"[green]✓ {build_target.name}[/green]")

    try:
        result = run_build(
            graph,
            target,
            force=force,
            timeout=settings.build_timeout,
            on_state_change=report,
        )
    except ResforgeError as e:
        err_console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        output = {
            "target": result.target,
            "status": result.status.value,
            "targets": [
                {"name": o.name, "state": o.state.value} for o in result.outcomes
            ],
            "failure": None
            if result.failure is None
            else {
                "target": result.failure.target,
                "code": result.failure.code,
                "phase": result.failure.phase.value,
                "message": str(result.failure.underlying_error),
            },
        }
        print_json(output)

    if result.failure is not None:
        err_console.print(
            f"[red]Build failed at target '{result.failure.target}': "
            f"{result.failure.underlying_error}[/red]"
        )
        code = 130 if result.status == RunStatus.ABORTED else 1
        raise typer.Exit(code=code)


targets_app = typer.Typer(help="Inspect declared targets")
app.add_typer(targets_app, name="targets")


@targets_app.command("list")
def targets_list(
    file: FileOption = None,
    root: RootOption = None,
    toolchain: ToolchainOption = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List declared targets."""
    from resforge.builds.locator import is_satisfied

    settings = get_settings()
    graph = _load_graph(settings, file, root, toolchain)

    if json_output:
        output = [
            {
                "name": t.name,
                "artifact": str(t.artifact_path) if t.artifact_path else None,
                "prerequisites": list(t.prerequisites),
                "command": list(t.recipe.command) if t.recipe else None,
                "always_rebuild": t.always_rebuild,
                "satisfied": is_satisfied(t),
            }
            for t in graph
        ]
        print_json(output)
        return

    console.print(f"[bold]Found {len(graph)} target(s):[/bold]")
    console.print()
    for t in graph:
        console.print(f"  [green]{t.name}[/green]")
        if t.artifact_path:
            console.print(f"    Artifact: {t.artifact_path}")
        elif t.always_rebuild:
            console.print("    Artifact: (none, always rebuilt)")
        else:
            console.print("    Artifact: (phony)")
        if t.prerequisites:
            console.print(f"    Prerequisites: {', '.join(t.prerequisites)}")
        if t.recipe:
            console.print(f"    Command: {' '.join(t.recipe.command)}")
            console.print(f"    Directory: {t.recipe.working_directory}")
        console.print()


@targets_app.command("show")
def targets_show(
    file: FileOption = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the effective target declaration."""
    from resforge.errors import ResforgeError
    from resforge.targets.io import (
        declaration_to_json_string,
        declaration_to_yaml_string,
    )
    from resforge.targets.service import load_declaration_file

    settings = get_settings()
    try:
        declaration = load_declaration_file(file or settings.targets_file)
    except ResforgeError as e:
        err_console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        text = declaration_to_json_string(declaration)
    else:
        text = declaration_to_yaml_string(declaration)
    console.print(text, soft_wrap=True, markup=False)


@targets_app.command("plan")
def targets_plan(
    target: Annotated[
        str | None,
        typer.Argument(help="Target to resolve (default: the aggregate target)"),
    ] = None,
    file: FileOption = None,
    root: RootOption = None,
    toolchain: ToolchainOption = None,
) -> None:
    """Show the resolved build order of a target."""
    from resforge.builds.scheduler import plan_build
    from resforge.errors import ResforgeError

    settings = get_settings()
    graph = _load_graph(settings, file, root, toolchain)
    target = target or _default_target(graph)
    try:
        plan = plan_build(graph, target)
    except ResforgeError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None

    for index, p in enumerate(plan, start=1):
        state = "satisfied" if p.satisfied else "unsatisfied"
        console.print(f"  {index}. {p.target.name} ({state})")


release_app = typer.Typer(help="Assemble, publish and prune nightly releases")
app.add_typer(release_app, name="release")


def _parse_date(value: str | None) -> date:
    if value is None:
        return date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        err_console.print(f"[red]Invalid date (expected YYYY-MM-DD): {value}[/red]")
        raise typer.Exit(code=1) from None


DateOption = Annotated[
    str | None,
    typer.Option("--date", "-d", help="Release date YYYY-MM-DD (default: today)"),
]
DistOption = Annotated[
    Path | None,
    typer.Option("--dist-dir", help="Directory of downloaded bundles"),
]
ContractsOption = Annotated[
    Path | None,
    typer.Option("--contracts-dir", help="Directory of contract artifacts"),
]
RepoOption = Annotated[
    str | None,
    typer.Option("--repo", "-r", help="Repository (owner/name)"),
]


def _assemble(
    settings: Settings,
    day: str | None,
    dist_dir: Path | None,
    contracts_dir: Path | None,
) -> "ReleaseBundle":
    from resforge.release.bundle import ReleaseAssemblyError, assemble_release

    try:
        return assemble_release(
            dist_dir or settings.dist_dir,
            contracts_dir or settings.contracts_dir,
            _parse_date(day),
            tag_prefix=settings.release_tag_prefix,
        )
    except ReleaseAssemblyError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None


def _release_client(settings: Settings, repo: str | None) -> "GitHubReleaseClient":
    from resforge.release.github import GitHubReleaseClient, create_http_client

    repository = repo or settings.github_repository
    if not repository:
        err_console.print(
            "[red]No repository configured (use --repo or RESFORGE_GITHUB_REPOSITORY)[/red]"
        )
        raise typer.Exit(code=1)
    token = settings.github_token.get_secret_value() if settings.github_token else None
    http_client = create_http_client(
        token, api_url=settings.github_api_url, timeout=settings.http_timeout
    )
    try:
        return GitHubReleaseClient(http_client, repository)
    except ValueError as e:
        http_client.close()
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None


@release_app.command("bundle")
def release_bundle(
    day: DateOption = None,
    dist_dir: DistOption = None,
    contracts_dir: ContractsOption = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Assemble and check the nightly release files without publishing."""
    settings = get_settings()
    bundle = _assemble(settings, day, dist_dir, contracts_dir)

    if json_output:
        output = {
            "tag": bundle.tag,
            "prerelease": bundle.prerelease,
            "files": [str(f) for f in bundle.files],
        }
        print_json(output)
    else:
        console.print(f"[bold]Release {bundle.tag}[/bold] ({len(bundle.files)} file(s))")
        for f in bundle.files:
            console.print(f"  - {f}")


@release_app.command("publish")
def release_publish(
    day: DateOption = None,
    dist_dir: DistOption = None,
    contracts_dir: ContractsOption = None,
    repo: RepoOption = None,
) -> None:
    """Publish the dated nightly pre-release."""
    from resforge.release.github import PublishError
    from resforge.release.service import publish_release

    settings = get_settings()
    bundle = _assemble(settings, day, dist_dir, contracts_dir)
    client = _release_client(settings, repo)

    try:
        release = publish_release(client, bundle)
    except PublishError as e:
        err_console.print(f"[red]Publish failed: {e}[/red]")
        raise typer.Exit(code=1) from None
    finally:
        client.client.close()

    console.print(f"[green]✓ Published {bundle.tag}[/green]")
    if release.get("html_url"):
        console.print(f"  {release['html_url']}")


@release_app.command("prune")
def release_prune(
    repo: RepoOption = None,
    keep: Annotated[
        int | None,
        typer.Option("--keep", "-k", min=0, help="Number of releases to keep"),
    ] = None,
    pattern: Annotated[
        str | None,
        typer.Option("--pattern", "-p", help="Tag substring of prunable releases"),
    ] = None,
    keep_tags: Annotated[
        bool,
        typer.Option("--keep-tags", help="Do not delete tags of pruned releases"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run", "-n", help="Show what would be pruned without actually pruning"
        ),
    ] = False,
) -> None:
    """Delete nightly releases older than the most recent ones."""
    from resforge.release.github import PublishError
    from resforge.release.service import prune_releases

    settings = get_settings()
    client = _release_client(settings, repo)

    try:
        pruned = prune_releases(
            client,
            keep_latest=settings.release_keep_latest if keep is None else keep,
            tag_pattern=pattern or settings.release_tag_prefix,
            delete_tags=not keep_tags,
            dry_run=dry_run,
        )
    except PublishError as e:
        err_console.print(f"[red]Prune failed: {e}[/red]")
        raise typer.Exit(code=1) from None
    finally:
        client.client.close()

    if not pruned:
        console.print("[yellow]No releases to prune[/yellow]")
        return
    prefix = "[DRY RUN] Would prune" if dry_run else "Pruned"
    console.print(f"[bold]{prefix} {len(pruned)} release(s):[/bold]")
    for tag in pruned:
        console.print(f"  - {tag}")


if __name__ == "__main__":
    app()
