"""CLI entrypoint for rootid."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .jobs.loader import find_workspace


def _parse_env(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> dict[str, str]:
    env: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", ctx=ctx, param=param)
        env[key] = value
    return env


env_option = click.option(
    "--env",
    "-e",
    "env",
    multiple=True,
    callback=_parse_env,
    metavar="KEY=VALUE",
    help="Extra build environment variable (repeatable)",
)


@click.group()
@click.version_option(__version__, prog_name="rootid")
@click.option(
    "--workspace",
    "-w",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Workspace directory holding jobs/ (defaults to auto-detected)",
)
@click.option("--verbose", is_flag=True, help="Log identifier reads and writes to stderr")
@click.pass_context
def cli(ctx: click.Context, workspace: Path | None, verbose: bool) -> None:
    """rootid - trace every build in a pipeline back to its root build.

    Propagate, inspect and clean up the root build identifier of a job workspace.
    """
    ctx.ensure_object(dict)
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )
    ctx.obj["workspace"] = workspace


def _workspace(ctx: click.Context) -> Path:
    workspace = ctx.obj.get("workspace")
    if workspace is None:
        workspace = find_workspace(Path.cwd())
        if workspace is None:
            raise click.ClickException("Workspace not found. Pass --workspace /path or run from inside one.")
    if not (workspace / "jobs").is_dir():
        raise click.BadParameter(f"Directory '{workspace}' has no jobs/ folder.", param_hint="--workspace / -w")
    return workspace.resolve()


@cli.command()
@click.argument("job")
@click.argument("build_number", type=int)
@env_option
def identifier(job: str, build_number: int, env: dict[str, str]) -> None:
    """Print the identifier a root build of JOB would get."""
    from .commands.builds import run_identifier

    sys.exit(run_identifier(job, build_number, env=env))


@cli.command()
@click.argument("job")
@click.argument("build_number", type=int)
@click.option("--upstream-job", default=None, help="Job that triggered this build (marks it as derived)")
@click.option("--upstream-build", type=int, default=None, help="Build number of the upstream job")
@env_option
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def propagate(
    ctx: click.Context,
    job: str,
    build_number: int,
    upstream_job: str | None,
    upstream_build: int | None,
    env: dict[str, str],
    output_json: bool,
) -> None:
    """Write the build's identifier into every direct downstream job.

    Examples:

        rootid propagate core-lib 12

        rootid propagate app-server 40 --upstream-job core-lib --upstream-build 12
    """
    from .commands.builds import run_propagate

    try:
        exit_code = run_propagate(
            _workspace(ctx),
            job,
            build_number,
            upstream_job=upstream_job,
            upstream_build=upstream_build,
            env=env,
            output_json=output_json,
        )
    except OSError as e:
        raise click.ClickException(f"Propagation aborted: {e}") from e
    sys.exit(exit_code)


@cli.command()
@click.argument("job")
@click.argument("build_number", type=int)
@click.pass_context
def cleanup(ctx: click.Context, job: str, build_number: int) -> None:
    """Remove the identifier parameter from JOB after a successful build."""
    from .commands.builds import run_cleanup

    try:
        exit_code = run_cleanup(_workspace(ctx), job, build_number)
    except OSError as e:
        raise click.ClickException(f"Cleanup failed: {e}") from e
    sys.exit(exit_code)


@cli.command()
@click.argument("job")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def show(ctx: click.Context, job: str, output_json: bool) -> None:
    """Show JOB's parameters and direct downstream jobs."""
    from .commands.jobs_cmd import run_show

    sys.exit(run_show(_workspace(ctx), job, output_json=output_json))


@cli.command()
@click.option("--from", "start", default=None, metavar="JOB", help="Only list jobs transitively downstream of JOB")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def graph(ctx: click.Context, start: str | None, output_json: bool) -> None:
    """Show the trigger graph and report cycles."""
    from .commands.jobs_cmd import run_graph

    sys.exit(run_graph(_workspace(ctx), start=start, output_json=output_json))


@cli.command()
@click.argument("job")
@click.argument("build_number", type=int)
@click.argument("artifact_path")
@click.option("--repository", "-r", default="", help="Target repository")
@click.option("--inherited", is_flag=True, help="Use the identifier stored on JOB instead of computing one")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def annotate(
    ctx: click.Context,
    job: str,
    build_number: int,
    artifact_path: str,
    repository: str,
    inherited: bool,
    output_json: bool,
) -> None:
    """Show the deploy path of ARTIFACT_PATH with its build-root property."""
    from .commands.annotate_cmd import run_annotate

    sys.exit(
        run_annotate(
            _workspace(ctx),
            job,
            build_number,
            artifact_path,
            repository=repository,
            inherited=inherited,
            output_json=output_json,
        )
    )


@cli.command()
@click.option("--last", "last_n", type=int, default=None, help="Show only the last N entries")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def audit(ctx: click.Context, last_n: int | None, output_json: bool) -> None:
    """Show the audit log of identifier writes."""
    from .commands.audit_cmd import run_audit

    sys.exit(run_audit(_workspace(ctx), last_n=last_n, output_json=output_json))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
