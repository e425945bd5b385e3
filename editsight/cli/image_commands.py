"""
Image editing CLI commands for EditSight

Provides command-line access to adjustments, presets and export.
"""

import logging
from pathlib import Path

import click

from ..config import get_config_value
from ..errors import EditSightError
from ..io.image_io import decode_image, save_image, validate_image_file
from ..processing.adjustment_engine import AdjustmentEngine
from ..processing.color.presets import PresetName, preset_for, preset_names
from ..processing.export import DEFAULT_FILENAME_PREFIX, export_snapshot
from ..processing.models import ADJUSTMENT_FIELDS, AdjustmentPatch, AdjustmentVector

logger = logging.getLogger(__name__)

ADJUSTMENT_RANGE = click.FloatRange(-100, 100, clamp=True)


def adjustment_options(func):
    """Add one ``--<field>`` option per adjustment field."""
    for name in reversed(ADJUSTMENT_FIELDS):
        func = click.option(f'--{name}', type=ADJUSTMENT_RANGE, default=None,
                            help=f'{name.capitalize()} (-100 to 100)')(func)
    return func


@click.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('output_path', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--preset', '-p', type=click.Choice(preset_names()), help='Preset look to start from')
@adjustment_options
@click.pass_context
def adjust(ctx, input_path, output_path, preset, **values):
    """
    Apply color adjustments to an image.

    The preset (if any) is applied first; explicit adjustment options
    override its values.
    """
    config = ctx.obj.get('config', {})
    quiet = ctx.obj.get('quiet', False)

    adjustments = AdjustmentVector()
    if preset:
        adjustments = preset_for(preset).apply_to(adjustments)
    adjustments = AdjustmentPatch.from_dict(values).apply_to(adjustments)

    engine = AdjustmentEngine.from_config(config)
    try:
        source = decode_image(input_path)
        result = engine.apply(source, adjustments)
        save_image(result, output_path)
    except EditSightError as e:
        raise click.ClickException(str(e))

    if not quiet:
        active = {k: v for k, v in adjustments.to_dict().items() if v != 0}
        click.echo(f"✓ Adjusted {input_path.name} -> {output_path}")
        if active:
            click.echo("  " + ", ".join(f"{k}={v:+g}" for k, v in active.items()))


@click.command(name='export')
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('output_path', type=click.Path(path_type=Path))
@click.option('--width', '-w', type=click.IntRange(min=1), help='Target width in pixels')
@click.option('--height', '-h', type=click.IntRange(min=1), help='Target height in pixels')
@click.pass_context
def export_image(ctx, input_path, output_path, width, height):
    """
    Cover-fit an image to an exact export size.

    OUTPUT_PATH may be a directory, in which case a timestamped file name
    is generated using the configured export format and prefix.
    """
    config = ctx.obj.get('config', {})
    quiet = ctx.obj.get('quiet', False)

    width = width or get_config_value(config, 'export.width', 1350)
    height = height or get_config_value(config, 'export.height', 1080)
    image_format = get_config_value(config, 'export.format', 'PNG') if output_path.is_dir() else None

    try:
        source = decode_image(input_path)
        written = export_snapshot(
            source, output_path, width, height,
            image_format=image_format,
            filename_prefix=get_config_value(config, 'export.filename_prefix', DEFAULT_FILENAME_PREFIX)
        )
    except EditSightError as e:
        raise click.ClickException(str(e))

    if not quiet:
        click.echo(f"✓ Exported {input_path.name} ({source.width}x{source.height}) "
                   f"-> {written} ({width}x{height})")


@click.command()
@click.argument('name', required=False, type=click.Choice(preset_names()))
def presets(name):
    """List preset looks and their adjustment values."""
    selected = [PresetName(name)] if name else list(PresetName)

    for preset in selected:
        click.echo(preset.value)
        for field_name, value in preset_for(preset).to_dict().items():
            click.echo(f"  {field_name:<12} {value:+g}")


@click.command()
@click.argument('paths', nargs=-1, required=True, type=click.Path(path_type=Path))
@click.pass_context
def validate(ctx, paths):
    """Check that files are acceptable uploads."""
    config = ctx.obj.get('config', {})
    max_size = get_config_value(config, 'upload.max_file_size_mb', 20)
    formats = get_config_value(config, 'upload.supported_formats', ['JPEG', 'PNG', 'WEBP', 'HEIF'])

    failures = 0
    for path in paths:
        result = validate_image_file(path, max_size_mb=max_size, supported_formats=formats)
        if result.valid:
            click.echo(f"✓ {path}")
        else:
            failures += 1
            click.echo(f"✗ {path}: {result.error}", err=True)

    if failures:
        ctx.exit(1)
