"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from unillm.cli_commands.codec import decode_cmd, encode_cmd, normalize_cmd
    from unillm.cli_commands.generate import generate_cmd

    cli.add_command(encode_cmd)
    cli.add_command(decode_cmd)
    cli.add_command(normalize_cmd)
    cli.add_command(generate_cmd)
