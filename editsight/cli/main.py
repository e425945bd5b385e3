"""
EditSight Command Line Interface

Main CLI entry point for EditSight image adjustment and export.
"""

import logging
from typing import Optional

import click

from ..config import load_config, get_config_value
from ..utils.logging import setup_console_logging
from .image_commands import adjust, export_image, presets, validate

logger = logging.getLogger(__name__)


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True, dir_okay=False),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    EditSight - Photo color adjustment and export

    Apply tone and color adjustments or preset looks to images and
    produce fixed-size exports.
    """
    if ctx.obj is None:
        ctx.obj = {}

    ctx.obj['config'] = load_config(config)

    level = get_config_value(ctx.obj['config'], 'logging.level', 'INFO')
    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'

    # Only configure logging once per process
    if not logging.getLogger().handlers:
        setup_console_logging(
            level=level,
            color=get_config_value(ctx.obj['config'], 'logging.color', True),
            fmt=get_config_value(ctx.obj['config'], 'logging.format',
                                 '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
    else:
        logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))

    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


main.add_command(adjust)
main.add_command(export_image)
main.add_command(presets)
main.add_command(validate)


if __name__ == '__main__':
    main()
