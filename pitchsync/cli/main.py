# pitchsync/cli/main.py

"""
Main entry point for the pitchsync CLI application.
Uses Click for command-line interface handling.
"""

import logging

import click

from pitchsync.version import __version__
from .base_cmd import ConfigGroup, verbose_option, quiet_option
from .stretch_cmd import stretch_cmd
from .pitch_cmd import pitch_track_cmd

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


# --- Main CLI Group ---
@click.group(context_settings=CONTEXT_SETTINGS, cls=ConfigGroup)
@click.version_option(__version__, '-V', '--version', package_name='pitchsync', prog_name='pitchsync')
@verbose_option
@quiet_option
@click.pass_context
def main_cli(ctx, verbose: int, quiet: bool):
    """
    pitchsync: change the speed of speech audio without changing its pitch.

    Configuration is loaded from:
    Defaults -> ./pitchsync.toml -> ~/.config/pitchsync/pitchsync.toml -> Env Vars

    Use -v for verbose output, -vv for debug output, -q for quiet mode.
    """
    logger.debug("pitchsync CLI group invoked.")


# --- Register Commands ---
main_cli.add_command(stretch_cmd)
main_cli.add_command(pitch_track_cmd)

cli = main_cli

if __name__ == "__main__":
    cli()
