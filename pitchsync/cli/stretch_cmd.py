# pitchsync/cli/stretch_cmd.py

"""
CLI command for changing the playback speed of an audio file.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from pitchsync.config.models import PitchSyncConfig
from pitchsync.core.audio.io import load_pcm16, save_pcm16
from pitchsync.core.psola import PSOLAEngine

logger = logging.getLogger(__name__)

# --- Shared Pitch Options ---
min_freq_option = click.option("--min-freq", type=int, default=None,
                               help="Lowest voice frequency searched, in Hz. [default: from config, 65]")
max_freq_option = click.option("--max-freq", type=int, default=None,
                               help="Highest voice frequency searched, in Hz. [default: from config, 400]")
noise_floor_option = click.option("--noise-floor", type=float, default=None,
                                  help="Average mismatch a frame must exceed to be voiced. [default: from config, 100]")


def resolve_pitch_params(
    config: PitchSyncConfig,
    min_freq: Optional[int],
    max_freq: Optional[int],
    noise_floor: Optional[float]
) -> dict:
    """Command-line values win over configured ones."""
    pitch_cfg = config.parameters.pitch
    return {
        "min_voice_frequency_hz": min_freq if min_freq is not None else pitch_cfg.min_voice_frequency_hz,
        "max_voice_frequency_hz": max_freq if max_freq is not None else pitch_cfg.max_voice_frequency_hz,
        "noise_floor_threshold": noise_floor if noise_floor is not None else pitch_cfg.noise_floor_threshold,
    }


@click.command("stretch")
@click.argument("speed", type=float)
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("output_file", type=click.Path(dir_okay=False, resolve_path=True))
@min_freq_option
@max_freq_option
@noise_floor_option
@click.pass_context
def stretch_cmd(
    ctx,
    speed: float,
    input_file: str,
    output_file: str,
    min_freq: Optional[int],
    max_freq: Optional[int],
    noise_floor: Optional[float]
):
    """
    Change playback speed without changing pitch.

    SPEED > 1 speeds up, SPEED < 1 slows down (e.g. 2.0 halves the duration).
    """
    config: PitchSyncConfig = ctx.obj['config']
    input_path = Path(input_file)
    output_path = Path(output_file)
    params = resolve_pitch_params(config, min_freq, max_freq, noise_floor)

    logger.info(f"Running 'stretch' on: {input_path}")
    logger.info(f"Output file: {output_path}")
    logger.info(f"Params: speed={speed}, {params}")

    try:
        # 1. Read Input Audio
        samples, sr, channels = load_pcm16(input_path)

        # 2. Time-Scale
        engine = PSOLAEngine(
            samples,
            sr,
            speed,
            max_speed=config.parameters.stretch.max_speed,
            **params
        )
        result = engine.run()

        # 3. Save Output Audio
        save_pcm16(result.samples, sr, output_path, subtype=config.defaults.output_subtype)

        click.echo(
            f"Successfully applied speed {speed} to '{input_path.name}' "
            f"({len(samples)} -> {len(result.samples)} samples), saved to '{output_path.name}'."
        )

    except FileNotFoundError:
        raise click.UsageError(f"Input file not found: {input_path}")
    except ValueError as e:
        raise click.UsageError(f"Error during time scaling: {e}")
    except Exception as e:
        logger.error(f"An unexpected error occurred during time scaling: {e}", exc_info=True)
        raise click.Abort(f"An unexpected error occurred: {e}")
