"""File system helpers for batch image preparation."""

import re
from pathlib import Path
from typing import List, Set

from rich.console import Console

console = Console()

BRACE_GROUP = re.compile(r"^(?P<head>.*?)\{(?P<choices>[^{}]*)\}(?P<tail>.*)$")


def expand_brace_pattern(pattern: str) -> List[str]:
    """Expand '*.{jpg,png}' into ['*.jpg', '*.png'].

    Only the first brace group is expanded; patterns without one, or with an
    unbalanced brace, come back unchanged.
    """
    brace_match = BRACE_GROUP.match(pattern)
    if brace_match is None:
        if "{" in pattern:
            console.print(
                f"[yellow]Warning: could not expand braces in '{pattern}', "
                "using it verbatim"
            )
        return [pattern]

    head, tail = brace_match["head"], brace_match["tail"]
    return [
        f"{head}{choice.strip()}{tail}"
        for choice in brace_match["choices"].split(",")
        if choice.strip()
    ]


def discover_images_matching_pattern(
    work_directory: Path, image_pattern: str
) -> Set[Path]:
    """Find regular files in work directory matching a brace-aware glob."""
    matched_images = set()
    for glob_pattern in expand_brace_pattern(image_pattern):
        matched_images.update(
            candidate
            for candidate in work_directory.glob(glob_pattern)
            if candidate.is_file()
        )
    return matched_images


def generate_unique_output_filename(
    output_directory: Path, source_image_path: Path
) -> Path:
    """Pick output path for source image, appending _N on collisions."""
    candidate_path = output_directory / source_image_path.name
    collision_counter = 0

    while candidate_path.exists():
        collision_counter += 1
        candidate_path = output_directory / (
            f"{source_image_path.stem}_{collision_counter}{source_image_path.suffix}"
        )

    return candidate_path


def validate_work_directory_exists(work_directory_path: Path) -> None:
    """Validate that work directory exists and is a directory."""
    if not work_directory_path.exists():
        console.print(f"[red]Directory not found: {work_directory_path}")
        raise FileNotFoundError(
            f"Work directory does not exist: {work_directory_path}"
        )

    if not work_directory_path.is_dir():
        console.print(f"[red]Path is not a directory: {work_directory_path}")
        raise NotADirectoryError(
            f"Path is not a directory: {work_directory_path}"
        )
