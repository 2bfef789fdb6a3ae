"""yeet CLI entrypoint."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler

from yeet import __version__


class CommitByDefaultGroup(click.Group):
    """Anything that is not a subcommand is a commit message.

    ``yeet fix the parser`` runs ``yeet commit fix the parser``; a bare
    ``yeet`` runs ``yeet commit``. A subcommand followed by words it cannot
    take is a message too: ``yeet doctor some words`` commits
    "doctor some words".
    """

    default_command = "commit"

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        if args and self._is_message(ctx, args):
            cmd = self.get_command(ctx, self.default_command)
            return self.default_command, cmd, args
        return super().resolve_command(ctx, args)

    def _is_message(self, ctx: click.Context, args: list[str]) -> bool:
        cmd = self.get_command(ctx, args[0])
        if cmd is None:
            return True
        rest = args[1:]
        if not rest or rest[0].startswith("-"):
            return False
        if isinstance(cmd, click.Group):
            return cmd.get_command(ctx, rest[0]) is None
        arguments = [p for p in cmd.params if isinstance(p, click.Argument)]
        if any(p.nargs < 0 for p in arguments):
            return False
        words = [arg for arg in rest if not arg.startswith("-")]
        return len(words) > sum(p.nargs for p in arguments)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # Keep -v output about yeet, not the HTTP stack.
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


@click.group(
    cls=CommitByDefaultGroup,
    invoke_without_command=True,
    context_settings={"ignore_unknown_options": True},
)
@click.version_option(version=__version__, prog_name="yeet")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.option("--trace", is_flag=True, help="Export OpenTelemetry spans to stderr (needs yeet[otel]).")
@click.pass_context
def main(ctx: click.Context, verbose: bool, trace: bool) -> None:
    """Stage, commit and push in one command, with an AI-written message.

    Run "yeet" to generate a message, or "yeet <message...>" to use your own.
    """
    _configure_logging(verbose)

    if trace:
        from yeet.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(service_name="yeet", export_to_console=True)
        except ImportError as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(1)

    if ctx.invoked_subcommand is None:
        from yeet.cli_commands.commit import commit

        ctx.invoke(commit)


# Register subcommands
from yeet.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
