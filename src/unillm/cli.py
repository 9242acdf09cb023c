"""unillm CLI entrypoint."""

from __future__ import annotations

import click

from unillm import __version__


@click.group()
@click.version_option(version=__version__, prog_name="unillm")
def main() -> None:
    """unillm: one request model, many LLM vendors."""


# Register subcommands
from unillm.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
