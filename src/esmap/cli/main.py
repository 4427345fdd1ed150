"""
esmap CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import click

from .commands import build, importmap


@click.group()
@click.version_option(package_name="esmap")
def main():
    """esmap: Import maps and bundles for ECMAScript module trees.

    \b
    Quick Start:
      esmap importmap ./files --output importmap.json
      esmap build --entry-point files/index.mjs --minify
    """
    pass


# Register commands
main.add_command(importmap.importmap)
main.add_command(build.build)

if __name__ == "__main__":
    main()
