# pitchsync/cli/base_cmd.py

"""
Base setup for CLI commands: configuration loading and logging initialization.
"""

import logging
import sys

import click

from pitchsync.config import load_configuration, PitchSyncConfig
from pitchsync.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _resolve_verbosity(ctx: click.Context) -> int:
    """Maps -v/-q flags on this or the parent context to a verbosity level."""
    for context in (ctx, ctx.parent):
        if context is None:
            continue
        if context.params.get('quiet', False):
            return -1
        verbose = context.params.get('verbose', 0) or 0
        if verbose > 0:
            return verbose
    return 0


class ConfigGroup(click.Group):
    """
    A custom Click Group that loads configuration and sets up logging
    before invoking the group or its subcommands.
    Passes the config via the context object (ctx.obj['config']).
    """
    def invoke(self, ctx: click.Context):
        if ctx.obj is None:
            ctx.obj = {}

        setup_success = False
        try:
            # --- Setup Phase ---
            if 'config' not in ctx.obj:
                ctx.obj['config'] = load_configuration()
            else:
                logger.debug("Configuration already loaded in context.")
            config: PitchSyncConfig = ctx.obj['config']

            if not ctx.obj.get('logging_configured', False):
                setup_logging(config, _resolve_verbosity(ctx))
                ctx.obj['logging_configured'] = True
                logger.debug("Logging setup complete in ConfigGroup.")

            setup_success = True

            # --- Command Execution Phase ---
            return super().invoke(ctx)

        except click.exceptions.Exit:
            raise
        except Exception as e:
            if not setup_success:
                error_logger = logging.getLogger("pitchsync.error")
                error_logger.critical(f"Critical error during CLI setup: {repr(e)}", exc_info=True)
                print(f"CRITICAL SETUP ERROR: {repr(e)}", file=sys.stderr)
                ctx.exit(1)
            raise


# --- Common CLI Options ---
verbose_option = click.option(
    '-v', '--verbose',
    count=True,
    help="Increase verbosity level (-v for INFO, -vv for DEBUG)."
)
quiet_option = click.option(
    '-q', '--quiet',
    is_flag=True,
    default=False,
    help="Suppress all console output except critical errors."
)
