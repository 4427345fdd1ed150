"""
CLI Utilities - Shared helper functions for command line operations.

This module provides formatted printing, logging setup, and the merge of
``esmap.toml`` values with command line flags.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict

import click

from ..config import ProjectConfig


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def configure_logging(verbose: bool) -> None:
    """Send library logs to stderr; DEBUG with --verbose, INFO otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        datefmt="[%X]",
    )


def load_project_config(config_path: str) -> ProjectConfig:
    """
    Load ``esmap.toml``, exiting with a readable message if it is invalid.

    Args:
        config_path (str): Path to the config file. Missing files yield defaults.
    """
    try:
        return ProjectConfig.load(Path(config_path))
    except ValueError as e:
        echo_error(str(e))
        sys.exit(1)


def merge_overrides(base: Dict[str, Any], **overrides: Any) -> Dict[str, Any]:
    """Overlay CLI values onto config values, ignoring flags left unset."""
    merged = dict(base)
    for key, value in overrides.items():
        if value is None or value == ():
            continue
        merged[key] = list(value) if isinstance(value, tuple) else value
    return merged
