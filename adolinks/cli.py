"""CLI interface for adolinks.

This module provides the Typer-based command-line interface:

    adolinks links BUILD_URL     Resolve the work item links of a build
    adolinks check               Test the Azure DevOps connection settings
    adolinks config              Show the effective configuration
    adolinks configure           Save connection settings
"""

import asyncio
import json
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import asdict
from typing import Annotated, TypeVar

import typer
from rich.table import Table

from adolinks.config.manager import ConfigManager
from adolinks.config.store import ConfigurationStore
from adolinks.integrations.api_client import MAX_CONCURRENCY, MIN_CONCURRENCY, AdoApiClient
from adolinks.integrations.http_client import HttpJsonClient
from adolinks.integrations.results import Disabled, Failure, MapResult
from adolinks.utils.console import (
    console,
    print_error,
    print_header,
    print_info,
    print_success,
    print_warning,
    show_version,
)
from adolinks.utils.errors import AdoLinksError, ExitCode
from adolinks.utils.logging import setup_logging
from adolinks.web.connectivity_check import (
    ConnectivityCheck,
    ConnectivityCheckResponse,
    MessageCategory,
)
from adolinks.workitems.links import WorkItemLink
from adolinks.workitems.mapper import (
    AZURE_DEVOPS_BUILD_ENVIRONMENT,
    BuildInformation,
    WorkItemLinkMapper,
)

T = TypeVar("T")

# Create Typer app
app = typer.Typer(
    name="adolinks",
    help="adolinks - Azure DevOps work item links for build information",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        show_version()
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Resolve Azure DevOps work items for builds and test connection settings."""
    setup_logging()


class AsyncLoopAlreadyRunningError(AdoLinksError):
    """Raised when trying to run async code in an existing event loop."""

    _default_exit_code = ExitCode.GENERAL_ERROR


def run_async(coro_factory: Callable[[], Coroutine[None, None, T]]) -> T:
    """Run an async coroutine from synchronous CLI code.

    Takes a factory so that no coroutine is created when an event loop is
    already running.

    Raises:
        AsyncLoopAlreadyRunningError: If an event loop is already running
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is not None:
        raise AsyncLoopAlreadyRunningError(
            "Cannot run async operation: an event loop is already running. "
            "Consider using 'await' directly or running from a synchronous environment."
        )

    return asyncio.run(coro_factory())


def _load_config() -> ConfigManager:
    config = ConfigManager()
    config.load()
    return config


async def _with_api_client(
    store: ConfigurationStore,
    action: Callable[[AdoApiClient], Awaitable[T]],
) -> T:
    """Run ``action`` with an API client whose HTTP client is closed afterwards."""
    async with HttpJsonClient(timeout_seconds=store.timeout_seconds) as http_client:
        api_client = AdoApiClient(
            http_client,
            store,
            override_lookup=store.get_tenant_override,
            max_concurrency=store.max_concurrency,
        )
        return await action(api_client)


@app.command()
def links(
    build_url: Annotated[
        str,
        typer.Argument(
            help="Browser URL of the build, e.g. "
            "https://dev.azure.com/org/project/_build/results?buildId=42",
        ),
    ],
    environment: Annotated[
        str,
        typer.Option(
            "--environment",
            "-e",
            help="Build environment recorded with the build information",
        ),
    ] = AZURE_DEVOPS_BUILD_ENVIRONMENT,
    tenant: Annotated[
        str | None,
        typer.Option(
            "--tenant",
            "-t",
            help="Tenant whose Azure DevOps overrides apply",
        ),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the links as JSON",
        ),
    ] = False,
) -> None:
    """Resolve the work item links of a build."""
    try:
        store = _load_config().build_store()
        build_information = BuildInformation(
            build_environment=environment,
            build_url=build_url,
        )

        async def resolve(api_client: AdoApiClient) -> MapResult[list[WorkItemLink]]:
            return await WorkItemLinkMapper(store, api_client).map(build_information, tenant)

        result = run_async(lambda: _with_api_client(store, resolve))
    except AdoLinksError as e:
        print_error(str(e))
        raise typer.Exit(e.exit_code) from e

    if isinstance(result, Disabled):
        print_warning(
            "The Azure DevOps Issue Tracker is disabled. "
            "Set ADO_ENABLED=true or run 'adolinks configure --enable'."
        )
        return

    if isinstance(result, Failure):
        print_error(result.error_string)
        raise typer.Exit(ExitCode.REMOTE_FAILURE)

    if as_json:
        typer.echo(json.dumps([asdict(link) for link in result.value], indent=2))
        return

    if not result.value:
        print_info("No work items are associated with this build.")
        return

    table = Table(title=None, show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Description")
    table.add_column("Link")
    for link in result.value:
        table.add_row(link.id, link.description, link.link_url)
    console.print(table)


@app.command()
def check(
    base_url: Annotated[
        str | None,
        typer.Option(
            "--base-url",
            "-u",
            help="Azure DevOps organization or project URL (defaults to ADO_BASE_URL)",
        ),
    ] = None,
    pat: Annotated[
        str | None,
        typer.Option(
            "--pat",
            help="Personal Access Token to test (defaults to the saved token)",
        ),
    ] = None,
) -> None:
    """Test Azure DevOps connection settings."""
    try:
        store = _load_config().build_store()
        request = {
            "BaseUrl": base_url if base_url is not None else (store.base_url or ""),
            "PersonalAccessToken": pat or "",
        }

        async def run_check(api_client: AdoApiClient) -> ConnectivityCheckResponse:
            return await ConnectivityCheck(store, api_client).execute(request)

        response = run_async(lambda: _with_api_client(store, run_check))
    except AdoLinksError as e:
        print_error(str(e))
        raise typer.Exit(e.exit_code) from e

    print_header("Azure DevOps Connectivity Check")
    for message in response.messages:
        if message.category == MessageCategory.ERROR:
            print_error(message.message)
        elif message.category == MessageCategory.WARNING:
            print_warning(message.message)
        else:
            print_success(message.message)

    if not response.succeeded:
        raise typer.Exit(ExitCode.REMOTE_FAILURE)


@app.command("config")
def show_config() -> None:
    """Show the effective configuration (tokens are masked)."""
    _load_config().show()


@app.command()
def configure(
    enable: Annotated[
        bool | None,
        typer.Option(
            "--enable/--disable",
            help="Enable or disable the Azure DevOps Issue Tracker",
        ),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", "-u", help="Azure DevOps organization or collection URL"),
    ] = None,
    pat: Annotated[
        str | None,
        typer.Option("--pat", help="Personal Access Token (Build: Read, Work Items: Read)"),
    ] = None,
    release_note_prefix: Annotated[
        str | None,
        typer.Option("--release-note-prefix", help="Comment prefix marking a release note"),
    ] = None,
    max_concurrency: Annotated[
        int | None,
        typer.Option(
            "--max-concurrency",
            min=MIN_CONCURRENCY,
            max=MAX_CONCURRENCY,
            help="Work items resolved at the same time",
        ),
    ] = None,
    local: Annotated[
        bool,
        typer.Option("--local", help="Save to the project's .adolinks instead of ~/.adolinks-config"),
    ] = False,
) -> None:
    """Save Azure DevOps connection settings."""
    values = {
        "ADO_ENABLED": None if enable is None else str(enable).lower(),
        "ADO_BASE_URL": base_url,
        "ADO_PERSONAL_ACCESS_TOKEN": pat,
        "ADO_RELEASE_NOTE_PREFIX": release_note_prefix,
        "ADO_MAX_CONCURRENCY": None if max_concurrency is None else str(max_concurrency),
    }
    changes = {key: value for key, value in values.items() if value is not None}
    if not changes:
        print_warning("Nothing to save. Pass at least one option, see 'adolinks configure --help'.")
        raise typer.Exit(ExitCode.INVALID_ARGUMENT)

    config = _load_config()
    scope = "local" if local else "global"
    for key, value in changes.items():
        warning = config.save(key, value, scope=scope)
        print_success(f"Saved {key} to {scope} config")
        if warning:
            print_warning(warning)


if __name__ == "__main__":
    app()
