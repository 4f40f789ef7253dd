"""Utility functions for CLI output and paths."""

from pathlib import Path

from cli.constants import DOWNLOADS_DIR


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.
    
    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).
    
    Args:
        size_bytes: File size in bytes
        
    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    
    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0
    
    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    
    return f"{size:.2f} PiB"


def format_speed(bytes_per_second: float) -> str:
    """Format a transfer rate, e.g. '1.20 MiB/s'."""
    return f"{format_file_size(int(bytes_per_second))}/s"


def format_progress(fraction: float) -> str:
    """Format a 0..1 fraction as a percentage with one decimal."""
    return f"{fraction * 100:.1f}%"


def normalize_output_path(output_path: str, filename: str, base_dir: Path | None = None) -> tuple[Path, str | None]:
    """
    Normalize a save path, validating the mandatory downloads/ prefix when specified.

    Args:
        output_path: Output path (must start with downloads/ prefix if provided)
        filename: Original filename for default naming
        base_dir: Downloads directory, ./downloads when omitted

    Returns:
        Tuple of (normalized_path_object, error_message)
        error_message is None if validation succeeds
    """
    base_dir = (base_dir or Path.cwd() / DOWNLOADS_DIR).resolve()
    prefix = f"{DOWNLOADS_DIR}/"

    if output_path:
        path_str = output_path.strip()
        if not path_str.startswith(prefix):
            return Path(), f"Output path must start with '{prefix}' - did you mean '{prefix}{path_str}'?"

        output_file = base_dir / path_str[len(prefix):]

        try:
            if output_file.exists() and output_file.is_dir():
                output_file = output_file / filename

            resolved_path = output_file.resolve()
            resolved_path.relative_to(base_dir)
        except (OSError, RuntimeError, ValueError):
            return Path(), f"Invalid path: '{output_path}' is outside downloads directory"
        output_file = resolved_path
    else:
        output_file = base_dir / Path(filename).name

    return output_file, None
