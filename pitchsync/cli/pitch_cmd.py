# pitchsync/cli/pitch_cmd.py

"""
CLI command for exporting the pitch track the time-scaling engine follows.
"""

import logging
from pathlib import Path
from typing import Optional

import click
import numpy as np
import pandas as pd
from tabulate import tabulate

from pitchsync.config.models import PitchSyncConfig
from pitchsync.core.audio.io import load_pcm16
from pitchsync.core.psola import PSOLAEngine, PSOLAResult
from .stretch_cmd import min_freq_option, max_freq_option, noise_floor_option, resolve_pitch_params

logger = logging.getLogger(__name__)

TRACK_COLUMNS = ["position", "time_s", "period", "frequency_hz", "voiced"]


def pitch_track_to_dataframe(result: PSOLAResult) -> pd.DataFrame:
    """
    Tabulates the per-step period decisions of a run.

    Args:
        result: Output of PSOLAEngine.run().

    Returns:
        DataFrame with columns position, time_s, period, frequency_hz, voiced.
    """
    track = result.pitch_track
    positions = np.array([entry.position for entry in track], dtype=np.int64)
    periods = np.array([entry.period for entry in track], dtype=np.int64)
    return pd.DataFrame({
        "position": positions,
        "time_s": positions / result.sample_rate,
        "period": periods,
        "frequency_hz": result.sample_rate / periods,
        "voiced": np.array([entry.voiced for entry in track], dtype=bool),
    }, columns=TRACK_COLUMNS)


def summarize_track(df: pd.DataFrame) -> list:
    """Rows of (metric, value) describing a pitch track."""
    voiced = df[df["voiced"]]
    return [
        ("Steps", len(df)),
        ("Voiced steps", len(voiced)),
        ("Voiced ratio", f"{(len(voiced) / len(df)) if len(df) else 0.0:.3f}"),
        ("Median voiced frequency (Hz)", f"{voiced['frequency_hz'].median():.1f}" if len(voiced) else "n/a"),
    ]


@click.command("pitch-track")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("-o", "--output", type=click.Path(dir_okay=False, resolve_path=True), default=None,
              help="Output file for the pitch track (.csv or .json). [default: <output_dir>/<input>_pitch.csv]")
@min_freq_option
@max_freq_option
@noise_floor_option
@click.pass_context
def pitch_track_cmd(
    ctx,
    input_file: str,
    output: Optional[str],
    min_freq: Optional[int],
    max_freq: Optional[int],
    noise_floor: Optional[float]
):
    """Export the pitch period and voicing decided at every step."""
    config: PitchSyncConfig = ctx.obj['config']
    input_path = Path(input_file)
    if output is None:
        output_path = config.paths.output_dir / f"{input_path.stem}_pitch.csv"
    else:
        output_path = Path(output)
    params = resolve_pitch_params(config, min_freq, max_freq, noise_floor)

    logger.info(f"Running 'pitch-track' on: {input_path}")
    logger.info(f"Output file: {output_path}")
    logger.info(f"Params: {params}")

    ext = output_path.suffix.lower()
    if ext not in (".csv", ".json"):
        raise click.UsageError(f"Unsupported pitch track format '{ext}'. Use .csv or .json.")

    try:
        samples, sr, channels = load_pcm16(input_path)
        result = PSOLAEngine(samples, sr, 1.0, **params).run()
        df = pitch_track_to_dataframe(result)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        if ext == ".csv":
            df.to_csv(output_path, index=False)
        else:
            df.to_json(output_path, orient="records", indent=2)

        click.echo(tabulate(summarize_track(df), headers=["Metric", "Value"]))
        click.echo(f"Pitch track for '{input_path.name}' saved to '{output_path.name}'.")

    except FileNotFoundError:
        raise click.UsageError(f"Input file not found: {input_path}")
    except ValueError as e:
        raise click.UsageError(f"Error during pitch tracking: {e}")
    except Exception as e:
        logger.error(f"An unexpected error occurred during pitch tracking: {e}", exc_info=True)
        raise click.Abort(f"An unexpected error occurred: {e}")
