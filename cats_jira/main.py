"""cats-jira CLI: all commands."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated

import tomlkit
import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.table import Table

from cats_jira.client import JiraClient
from cats_jira.faults import JiraFault
from cats_jira.models import RepoDetails, UniformTestResult
from cats_jira.settings import CONFIG_PATH, _list_profiles, get_settings

app = typer.Typer(help="cats-jira: report CATS test failures to Jira", no_args_is_help=True)

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-P", help="Profile name from ~/.config/cats-jira/config.toml"),
]
ProjectOpt = Annotated[str | None, typer.Option("--project", help="Project key")]
TypeOpt = Annotated[str | None, typer.Option("--type", "-t", help="Issue type name")]
RepoOpt = Annotated[str | None, typer.Option("--repo", help="Git repository URL")]
BranchOpt = Annotated[str | None, typer.Option("--branch", "-b", help="Git branch")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every request")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


# ---------------------------------------------------------------------------
# Client factory
# ---------------------------------------------------------------------------


def get_client(profile: str | None = None) -> JiraClient:
    return JiraClient(get_settings(profile=profile))


@contextmanager
def _faults_exit() -> Iterator[None]:
    """Turn a JiraFault into a red message and exit status 1."""
    try:
        yield
    except JiraFault as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("projects")
def projects(profile: ProfileOpt = None) -> None:
    """List all projects."""
    with _faults_exit(), get_client(profile) as client:
        found = client.list_projects()

    table = Table(title="Projects")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("ID", style="dim")

    for p in found:
        table.add_row(p.key, p.name, p.id)

    rprint(table)


@app.command("issue-types")
def issue_types(project: ProjectOpt = None, profile: ProfileOpt = None) -> None:
    """List the issue types a project accepts."""
    with _faults_exit(), get_client(profile) as client:
        types = client.list_issue_types(project)

    table = Table(title="Issue Types")
    table.add_column("Name", style="cyan")
    table.add_column("ID", style="dim")

    for t in types:
        table.add_row(t.name, t.id)

    rprint(table)


@app.command("create-issue")
def create_issue(
    summary: Annotated[str, typer.Argument(help="Issue summary")],
    fingerprint: Annotated[str, typer.Option("--fingerprint", "-f", help="Stable identity of the failure")],
    description: Annotated[str | None, typer.Argument(help="Issue description")] = None,
    project: ProjectOpt = None,
    issue_type: TypeOpt = None,
    repo: RepoOpt = None,
    branch: BranchOpt = None,
    commit: Annotated[str | None, typer.Option("--commit", help="Commit under test")] = None,
    profile: ProfileOpt = None,
) -> None:
    """Create an issue for a test failure."""
    details = RepoDetails(url=repo, branch=branch, commit=commit)
    result = UniformTestResult(summary=summary, description=description, fingerprint=fingerprint)
    with _faults_exit(), get_client(profile) as client:
        created = client.create_issue(project, issue_type, details, result)

    rprint(f"[green]✓[/green] [bold]{created.key}[/bold] {summary}")
    rprint(f"  {created.url}")


@app.command("list-issues")
def list_issues(
    project: ProjectOpt = None,
    issue_type: TypeOpt = None,
    repo: RepoOpt = None,
    branch: BranchOpt = None,
    profile: ProfileOpt = None,
) -> None:
    """List unresolved issues assigned to me."""
    with _faults_exit(), get_client(profile) as client:
        issues = client.list_unresolved_issues(project, issue_type, RepoDetails(url=repo, branch=branch))

    table = Table(title="Unresolved Issues")
    table.add_column("Key", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Status")
    table.add_column("Summary")

    for issue in issues:
        table.add_row(issue.key, str(issue.id), issue.status or "—", issue.summary or "")

    rprint(table)


@app.command("close-issue")
def close_issue(
    issue_id: Annotated[int, typer.Argument(help="Numeric issue ID")],
    project: ProjectOpt = None,
    issue_type: TypeOpt = None,
    repo: RepoOpt = None,
    branch: BranchOpt = None,
    transition: Annotated[str | None, typer.Option("--transition", help="Transition name")] = None,
    profile: ProfileOpt = None,
) -> None:
    """Close one of my unresolved issues by applying a transition."""
    with _faults_exit(), get_client(profile) as client:
        client.close_issue_by_id(project, issue_type, RepoDetails(url=repo, branch=branch), issue_id, transition)

    rprint(f"[green]✓[/green] Closed issue {issue_id}")


@app.command("set-default")
def set_default(
    profile: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Set the default profile in ~/.config/cats-jira/config.toml."""
    if not CONFIG_PATH.exists():
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        doc = tomlkit.document()
        doc.add("default_profile", profile)
        CONFIG_PATH.write_text(tomlkit.dumps(doc))
        rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')
        return

    doc = tomlkit.load(CONFIG_PATH.open())
    profiles = _list_profiles(doc)
    if profile not in profiles:
        rprint(f"[red]Profile '{profile}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}[/red]")
        raise typer.Exit(1)

    doc["default_profile"] = profile
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show resolved configuration (masks the password)."""
    with _faults_exit():
        settings = get_settings(profile=profile)

    def show(val: str | None) -> str:
        return val if val is not None else "[dim](not set)[/dim]"

    table = Table(title="cats-jira Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("default_profile", show(settings.default_profile))
    table.add_row("url", show(settings.url))
    table.add_row("user", show(settings.user))
    table.add_row("password", "***" if settings.password else show(None))
    for name in ("project", "issue_type", "summary", "description", "repository", "branch", "commit", "role", "transition"):
        table.add_row(name, show(getattr(settings, name)))
    table.add_row("timeout", str(settings.timeout))

    rprint(table)
