"""Transform requests and batch preset loading."""

import textwrap
from pathlib import Path
from typing import List

import typer
import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, ValidationError
from rich.console import Console

console = Console()

CONFIG_FILENAME = "filmprep.yaml"

# Values used when a transform is requested without an explicit parameter
DEFAULT_BORDER_THICKNESS = 20
DEFAULT_ASPECT_RATIO = (1.0, 1.0)
DEFAULT_LONGEST_SIDE = 1350


class TransformRequest(BaseModel):
    """Optional parameters of each pipeline stage; None skips the stage."""

    model_config = ConfigDict(frozen=True)

    border_thickness: int | None = Field(default=None, ge=0)
    aspect_ratio: tuple[PositiveFloat, PositiveFloat] | None = None
    longest_side: int | None = Field(default=None, ge=1)


class BatchPreset(TransformRequest):
    """Transform request applied to every matching image of a directory."""

    output_dir: str = "filmprep-processed"
    image_pattern: str = Field(default="*.{jpg,jpeg,png,tif,tiff,webp}")


def build_transform_request(
    add_border: bool = False,
    border_thickness: int | None = None,
    fill: bool = False,
    aspect_ratio: tuple[float, float] | None = None,
    resize: bool = False,
    longest_side: int | None = None,
) -> TransformRequest:
    """Resolve command-line style flags and values into a transform request."""
    if add_border and border_thickness is None:
        border_thickness = DEFAULT_BORDER_THICKNESS
    if fill and aspect_ratio is None:
        aspect_ratio = DEFAULT_ASPECT_RATIO
    if resize and longest_side is None:
        longest_side = DEFAULT_LONGEST_SIDE

    return TransformRequest(
        border_thickness=border_thickness,
        aspect_ratio=aspect_ratio,
        longest_side=longest_side,
    )


def create_sample_configuration_file(config_path: Path) -> None:
    """Create sample configuration file with default batch preset."""
    sample_preset = BatchPreset(
        border_thickness=DEFAULT_BORDER_THICKNESS,
        aspect_ratio=DEFAULT_ASPECT_RATIO,
        longest_side=DEFAULT_LONGEST_SIDE,
    )
    try:
        with config_path.open("w") as f:
            yaml.safe_dump(
                [sample_preset.model_dump(mode="json")], f, sort_keys=False
            )
        console.print(f"[green]Created default config at {config_path}")
    except (PermissionError, OSError) as e:
        console.print(f"[red]Error creating config file: {e}")
        raise


def load_batch_presets(config_path: Path) -> List[BatchPreset]:
    """Load batch presets from YAML file."""
    try:
        with config_path.open() as f:
            raw_presets = yaml.safe_load(f) or []
            if not isinstance(raw_presets, list):
                console.print(
                    f"[red]Invalid configuration in {config_path}: expected a list of presets"
                )
                raise typer.Exit(1)
            return [
                BatchPreset.model_validate(preset_config)
                for preset_config in raw_presets
            ]
    except ValidationError as e:
        error_message = textwrap.dedent(f"""
            [red]Invalid configuration in {config_path}:
            [red]{e}
        """).strip()
        console.print(error_message)
        raise typer.Exit(1) from e
    except (FileNotFoundError, PermissionError) as e:
        console.print(f"[red]Error accessing config file: {e}")
        raise typer.Exit(1) from e
    except yaml.YAMLError as e:
        console.print(f"[red]Invalid YAML in {config_path}: {e}")
        raise typer.Exit(1) from e


def discover_configuration_file(work_directory: Path) -> Path:
    """Discover configuration file in work directory, creating if needed."""
    config_path = work_directory / CONFIG_FILENAME

    if not config_path.exists():
        create_sample_configuration_file(config_path)

    return config_path


def prepare_preset_output_directory(
    preset: BatchPreset, work_directory: Path
) -> BatchPreset:
    """Resolve preset output directory against work directory and create it."""
    absolute_output_path = work_directory / preset.output_dir

    try:
        absolute_output_path.mkdir(parents=True, exist_ok=True)
    except (PermissionError, OSError) as e:
        console.print(
            textwrap.dedent(f"""
            [red]Error creating output directory
            {absolute_output_path}: {e}
        """).strip()
        )
        raise

    return preset.model_copy(update={"output_dir": str(absolute_output_path)})
