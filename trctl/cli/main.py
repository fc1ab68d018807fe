"""Command-line entry point for trctl.

``trctl [--config FILE] [HOST] [directives...]`` loads the configuration,
resolves the daemon endpoint, then runs every directive in order on a
single event loop. The exit status is 0 only if every request succeeded.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Sequence

import click

from trctl.cli.directives import Directive, DirectiveRunner, render_usage, tokenize
from trctl.config.config import init_config
from trctl.rpc.accumulator import CommandAccumulator
from trctl.rpc.dispatcher import RequestDispatcher
from trctl.rpc.router import ResponseRouter
from trctl.rpc.session import Endpoint, SessionContext, build_rpc_url, parse_host_argument
from trctl.utils.console_utils import create_console, print_error, print_warning
from trctl.utils.exceptions import ConfigurationError
from trctl.utils.formatting import UnitFormatter
from trctl.utils.logging_config import get_logger, set_correlation_id

if TYPE_CHECKING:  # pragma: no cover
    from rich.console import Console

    from trctl.models import Config

logger = get_logger(__name__)

_DEBUG_FLAGS = frozenset({"-b", "--debug"})


def _split_host(args: Sequence[str]) -> tuple[Endpoint, list[str]]:
    """Take the endpoint off the front of ``args`` when it is not an option."""
    remaining = list(args)
    if remaining and not remaining[0].startswith("-"):
        return parse_host_argument(remaining.pop(0)), remaining
    return Endpoint(), remaining


def build_session_context(config: Config, endpoint: Endpoint) -> SessionContext:
    """Combine the configured defaults with the host argument."""
    rpc = config.rpc
    return SessionContext(
        url=build_rpc_url(endpoint, rpc.host, rpc.port, rpc.url_path),
        use_ssl=endpoint.use_ssl or rpc.use_ssl,
        auth=rpc.auth,
        netrc=rpc.netrc,
        debug=rpc.debug,
    )


async def run_directives(
    context: SessionContext,
    directives: Sequence[Directive],
    config: Config,
    out: Console,
    err: Console,
) -> bool:
    """Run directives against the daemon; True when every flush succeeded."""
    formatter = UnitFormatter(config.units)
    async with RequestDispatcher(
        context,
        timeout=config.rpc.timeout,
        blocklist_timeout=config.rpc.blocklist_timeout,
        max_session_retries=config.rpc.max_session_retries,
        err=err,
    ) as dispatcher:
        router = ResponseRouter(out, err, context.url, formatter)
        accumulator = CommandAccumulator(dispatcher, router, err)
        runner = DirectiveRunner(accumulator, context, out, err)
        return await runner.run(directives)


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
        "help_option_names": [],
    }
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file path",
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def cli(ctx: click.Context, config_file: str | None, args: tuple[str, ...]) -> None:
    """Remote control for a Transmission daemon."""
    out = create_console()
    err = create_console(stderr=True)

    if not args:
        render_usage(out)
        ctx.exit(1)

    try:
        config_manager = init_config(config_file)
        # log level only; the request echo starts where -b appears
        if _DEBUG_FLAGS.intersection(args):
            config_manager.apply_overrides({"observability": {"log_level": "DEBUG"}})
    except ConfigurationError as e:
        print_error(str(e), err)
        ctx.exit(1)

    config_manager.setup_logging()
    set_correlation_id()

    endpoint, remaining = _split_host(args)
    context = build_session_context(config_manager.config, endpoint)
    logger.debug("Using endpoint %s", context.http_url)

    try:
        ok = asyncio.run(
            run_directives(context, tokenize(remaining), config_manager.config, out, err)
        )
    except KeyboardInterrupt:
        print_warning("Interrupted", err)
        ctx.exit(130)

    ctx.exit(0 if ok else 1)


def main() -> None:
    """Main CLI entry point."""
    cli(prog_name="trctl")


if __name__ == "__main__":
    main()
