"""Command-line interface for filmprep image preparation."""

import functools
import textwrap
from pathlib import Path
from typing import Annotated, Callable, TypeVar

import typer
from rich.console import Console
from rich.progress import track

from .configuration import (
    BatchPreset,
    build_transform_request,
    discover_configuration_file,
    load_batch_presets,
    prepare_preset_output_directory,
)
from .file_operations import (
    discover_images_matching_pattern,
    generate_unique_output_filename,
    validate_work_directory_exists,
)
from .pipeline import apply_and_save
from .raster import ImageProcessingError

console = Console()

T = TypeVar("T")


def handle_application_errors(
    command_function: Callable[..., T],
) -> Callable[..., T]:
    """Handle errors in CLI commands gracefully."""

    @functools.wraps(command_function)
    def error_handling_wrapper(*args: object, **kwargs: object) -> T:
        try:
            return command_function(*args, **kwargs)
        except typer.Exit:
            # Pass through typer.Exit for correct CLI exit codes
            raise
        except Exception as unexpected_error:
            console.print(f"[red]Error: {unexpected_error}")
            raise typer.Exit(1) from unexpected_error

    return error_handling_wrapper


def process_single_image_with_error_capture(
    image_path: Path, preset: BatchPreset
) -> tuple[bool, str]:
    """Process single image and return success status with error details."""
    output_path = generate_unique_output_filename(Path(preset.output_dir), image_path)
    try:
        apply_and_save(image_path, preset, output_path)
        return True, ""
    except ImageProcessingError as processing_error:
        return False, str(processing_error)
    except ValueError as validation_error:
        return False, f"Value error: {validation_error}"
    except OSError as filesystem_error:
        return False, f"File system error: {filesystem_error}"
    except Exception as unexpected_error:
        error_description = f"Unexpected error: {unexpected_error.__class__.__name__}: {unexpected_error}"
        console.print(f"[red]Critical: {error_description}")
        raise RuntimeError(
            f"Unhandled error processing {image_path}"
        ) from unexpected_error


def process_images_for_preset(preset: BatchPreset, work_directory: Path) -> int:
    """Process all images matching preset pattern; return number of failures."""
    discovered_images = sorted(
        discover_images_matching_pattern(work_directory, preset.image_pattern)
    )

    if not discovered_images:
        console.print(f"[yellow]No images found for {preset.output_dir}")
        return 0

    console.print(
        textwrap.dedent(f"""
        [blue]Processing {len(discovered_images)} images for {preset.output_dir}
    """).strip()
    )

    processing_errors = []
    for image_path in track(
        discovered_images,
        description=f"Processing {preset.output_dir}...",
    ):
        processing_success, error_message = (
            process_single_image_with_error_capture(image_path, preset)
        )
        if not processing_success:
            processing_errors.append((image_path, error_message))

    for failed_image_path, error_description in processing_errors:
        console.print(
            f"[red]Error processing {failed_image_path}: {error_description}"
        )

    return len(processing_errors)


def execute_batch_preparation_workflow(work_directory_path: str) -> None:
    """Apply every configured preset to the images of a directory."""
    work_directory = Path(work_directory_path).resolve()
    validate_work_directory_exists(work_directory)

    configuration_file = discover_configuration_file(work_directory)
    presets = load_batch_presets(configuration_file)

    failure_count = 0
    for preset in presets:
        prepared_preset = prepare_preset_output_directory(preset, work_directory)
        failure_count += process_images_for_preset(prepared_preset, work_directory)

    if failure_count:
        raise typer.Exit(1)


app = typer.Typer(
    add_completion=False,
    help="Prepare photographs for posting: border, aspect fill and resize.",
    no_args_is_help=True,
)


@app.command("image")
@handle_application_errors
def prepare_image_command(
    input_image: Annotated[
        Path,
        typer.Argument(help="Image file to transform"),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output file (default: overwrite the input image)",
        ),
    ] = None,
    add_border: Annotated[
        bool,
        typer.Option(
            "--add-border",
            "-a",
            help="Add a white border of the default thickness (20 px)",
        ),
    ] = False,
    border_thickness: Annotated[
        int | None,
        typer.Option(
            "--border-thickness",
            "-b",
            min=0,
            help="Add a white border of this many pixels on each side",
        ),
    ] = None,
    fill: Annotated[
        bool,
        typer.Option(
            "--fill",
            "-f",
            help="Fill with white to a square (1:1) aspect ratio",
        ),
    ] = False,
    ratio: Annotated[
        tuple[float, float],
        typer.Option(
            "--ratio",
            "-r",
            help="Fill with white to the WIDTH HEIGHT aspect ratio",
        ),
    ] = (None, None),
    resize: Annotated[
        bool,
        typer.Option(
            "--resize",
            "-l",
            help="Resize so the longest side is the default 1350 px",
        ),
    ] = False,
    longest_side: Annotated[
        int | None,
        typer.Option(
            "--longest-side",
            "-s",
            min=1,
            help="Resize so the longest side has this many pixels",
        ),
    ] = None,
) -> None:
    """Add border, fill to aspect ratio and resize a single image, in that order."""
    transform_request = build_transform_request(
        add_border=add_border,
        border_thickness=border_thickness,
        fill=fill,
        aspect_ratio=None if None in ratio else ratio,
        resize=resize,
        longest_side=longest_side,
    )
    saved_path = apply_and_save(input_image, transform_request, output)
    console.print(f"[green]Saved {saved_path}")


@app.command("batch")
@handle_application_errors
def prepare_batch_command(
    input_directory: Annotated[
        str,
        typer.Argument(
            help="Directory containing images and filmprep.yaml presets"
        ),
    ],
) -> None:
    """Apply the presets from filmprep.yaml to every matching image."""
    execute_batch_preparation_workflow(input_directory)


# Create the main application instance
cli_application = app
