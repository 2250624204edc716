"""CLI entry point for voldicom."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from voldicom import __version__
from voldicom.api import read_volume, write_volume
from voldicom.core.types import SeriesMetadata
from voldicom.core.volume import Volume
from voldicom.io.metadata import default_metadata

app = typer.Typer(
    name="voldicom",
    help="Read and write 3D volumes as DICOM files and series.",
    add_completion=False,
)

# Reconfigure stdout/stderr to UTF-8 to avoid Windows charmap encoding errors
# with Rich output.
try:
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")
except (AttributeError, OSError):
    pass

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("voldicom")


def version_callback(value: bool):
    if value:
        console.print(f"voldicom {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "-v",
        "--verbose",
        help="Show detailed processing information.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """Read and write 3D volumes as DICOM files and series."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")


def _load(input_path: Path) -> Volume:
    volume = Volume()
    result = read_volume(input_path, volume)
    if not result:
        err_console.print(f"[red]Error:[/red] {result.message}")
        raise typer.Exit(code=1)
    return volume


@app.command()
def info(
    input_path: Path = typer.Argument(
        ...,
        help="Path to a .dcm file or a directory holding one DICOM series.",
        exists=True,
    ),
):
    """Show the dimensions, spacing and intensity range of a DICOM volume."""
    volume = _load(input_path)

    table = Table(title=f"DICOM volume {input_path}")
    table.add_column("Property", style="bold")
    table.add_column("Value", justify="right")
    nx, ny, nz, nc = volume.shape
    table.add_row("Dimensions", f"{nx} x {ny} x {nz}")
    table.add_row("Channels", str(nc))
    table.add_row("Spacing (mm)", "{:.4g} x {:.4g} x {:.4g}".format(*volume.spacing))
    table.add_row("Min", f"{float(volume.voxels.min()):.6g}")
    table.add_row("Max", f"{float(volume.voxels.max()):.6g}")
    console.print(table)


@app.command()
def convert(
    input_path: Path = typer.Argument(
        ...,
        help="Source .dcm file or series directory.",
        exists=True,
    ),
    output: Path = typer.Argument(
        ...,
        help="Destination .dcm file, or a directory for one file per slice.",
    ),
    max_value: float = typer.Option(
        -1.0,
        "--max-value",
        help="Intensity mapped to 255 (single-file output; negative = volume maximum).",
    ),
    patient_name: str = typer.Option(None, "--patient-name", help="PatientName to write."),
    patient_id: str = typer.Option(None, "--patient-id", help="PatientID to write."),
    series_description: str = typer.Option(
        None, "--series-description", help="SeriesDescription to write."
    ),
):
    """Re-encode a DICOM volume as an 8-bit file or series."""
    volume = _load(input_path)

    meta = _metadata_override(patient_name, patient_id, series_description)
    result = write_volume(output, volume, meta=meta, max_value=max_value)
    if not result:
        err_console.print(f"[red]Error:[/red] {result.message}")
        raise typer.Exit(code=1)

    nx, ny, nz, _ = volume.shape
    console.print(f"[green]Wrote[/green] {nx}x{ny}x{nz} volume to {output}")


def _metadata_override(
    patient_name: str | None,
    patient_id: str | None,
    series_description: str | None,
) -> SeriesMetadata | None:
    """Defaults with fresh UIDs, overlaid with any supplied strings."""
    if patient_name is None and patient_id is None and series_description is None:
        return None
    meta = default_metadata()
    return SeriesMetadata(
        patient_name=patient_name if patient_name is not None else meta.patient_name,
        patient_id=patient_id if patient_id is not None else meta.patient_id,
        series_description=(
            series_description
            if series_description is not None
            else meta.series_description
        ),
        study_uid=meta.study_uid,
        series_uid=meta.series_uid,
        instance_uid=meta.instance_uid,
        instance_number=meta.instance_number,
    )
