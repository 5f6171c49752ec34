"""
Sub Wrap CLI - Main entry point for the subwrap command

Runs a script or module with every call into chosen namespaces logged, and
lists what would be wrapped.
"""

import importlib
import json
import logging
import runpy
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__
from .config import Config
from .core.call_logger import CallLogger
from .core.introspector import NamespacePattern, list_callables, resolve_namespace
from .core.wrapsubs import wrapsubs
from .exceptions import SubWrapError


@click.group()
@click.version_option(version=__version__, prog_name="subwrap")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a JSON configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Log subwrap's own decisions")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Sub Wrap - log every call into whole Python packages"""
    ctx.ensure_object(dict)

    config = Config.initialize(config_path)
    if verbose:
        config.log_level = "DEBUG"
    ctx.obj["config"] = config

    logging.basicConfig(level=config.log_level, format="%(asctime)s - %(name)s - %(message)s")


@cli.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.option("--package", "-p", "packages", multiple=True, help="Namespace to wrap; 'pkg.*' for a family")
@click.option("--sub", "-s", "subs", multiple=True, help="Fully-qualified function to wrap")
@click.option("--inherited", is_flag=True, help="Also wrap inherited methods of wrapped classes")
@click.option("--post-on-error", is_flag=True, help="Log a return even when the call raises")
@click.option("--memory", is_flag=True, help="Include process RSS in return lines")
@click.option("--module", "-m", "as_module", is_flag=True, help="Treat TARGET as a module name")
@click.argument("target")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def run(
    packages: Tuple[str, ...],
    subs: Tuple[str, ...],
    inherited: bool,
    post_on_error: bool,
    memory: bool,
    as_module: bool,
    target: str,
    args: Tuple[str, ...],
):
    """Run TARGET with calls into the given namespaces logged."""
    if not packages and not subs:
        raise click.UsageError("Give at least one --package or --sub")

    calls_logger = logging.getLogger("subwrap.calls")
    calls_logger.setLevel(logging.INFO)
    calls = CallLogger(logger=calls_logger, include_memory=memory)

    if as_module:
        sys.path.insert(0, str(Path.cwd()))
    else:
        sys.path.insert(0, str(Path(target).resolve().parent))

    try:
        wrapsubs(
            packages=list(packages),
            subs=list(subs),
            wrap_inherited=inherited,
            pre=calls.pre,
            post=calls.post,
            post_on_error=post_on_error or None,
        )
    except SubWrapError as e:
        raise click.ClickException(str(e))

    sys.argv = [target, *args]
    try:
        if as_module:
            runpy.run_module(target, run_name="__main__", alter_sys=True)
        else:
            runpy.run_path(target, run_name="__main__")
    finally:
        stats = calls.get_stats()
        click.echo(f"subwrap: {stats['total_calls']} intercepted calls", err=True)


@cli.command(name="list")
@click.argument("namespace")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def list_command(namespace: str, output_json: bool):
    """List the functions subwrap would wrap in NAMESPACE"""
    pattern = NamespacePattern.parse(namespace)
    if pattern.wildcard:
        raise click.UsageError("list takes a single namespace, not a pattern")

    if str(Path.cwd()) not in sys.path:
        sys.path.insert(0, str(Path.cwd()))

    if resolve_namespace(namespace) is None:
        _import_longest_prefix(namespace)

    names = sorted(list_callables(namespace))

    if output_json:
        click.echo(json.dumps(names, indent=2))
    else:
        for name in names:
            click.echo(name)


@cli.command(name="config")
def show_config():
    """Print the effective settings"""
    click.echo(json.dumps(Config.to_dict(), indent=2))


def _import_longest_prefix(namespace: str) -> None:
    parts = namespace.split(".")
    for cut in range(len(parts), 0, -1):
        try:
            importlib.import_module(".".join(parts[:cut]))
            return
        except ImportError:
            continue
    raise click.ClickException(f"Cannot import any part of {namespace!r}")


if __name__ == "__main__":
    cli()
