"""
Atomic output writer for analysis results.
CSV and JSON outputs are staged in a temp file, fsynced, then renamed into place,
so readers see either the previous file or the complete new one.
"""

import os
import json
import logging
import tempfile
import time
from pathlib import Path
from typing import Dict, Any


logger = logging.getLogger(__name__)


class AtomicWriteError(Exception):
    """Raised when an output file cannot be written."""
    pass


def write_text_atomic(content: str, output_path: Path) -> Dict[str, Any]:
    """
    Write text (CSV, JSON) to output_path in one rename.

    Args:
        content: Text to write
        output_path: Final path for the file

    Returns:
        Dictionary with write results

    Raises:
        AtomicWriteError: If the file cannot be written
    """
    start_time = time.time()
    output_path = Path(output_path)
    temp_path = None

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)

        # Temp file in the same directory so the rename stays on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            suffix='.tmp',
            prefix=f'{output_path.stem}_',
            dir=output_path.parent
        )
        temp_path = Path(temp_path_str)

        with os.fdopen(temp_fd, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())  # Force write to disk

        os.replace(temp_path, output_path)

    except OSError as e:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError as cleanup_error:
                logger.warning(f"Could not remove temp file {temp_path}: {cleanup_error}")
        raise AtomicWriteError(f"Failed to write {output_path}: {e}")

    return {
        'status': 'completed',
        'output_path': str(output_path),
        'bytes_written': len(content.encode('utf-8')),
        'duration_seconds': time.time() - start_time
    }


def write_json_atomic(data: Any, output_path: Path) -> Dict[str, Any]:
    """
    Write a JSON document atomically.

    Args:
        data: JSON-serializable structure (dates are written as ISO strings)
        output_path: Path for the JSON file

    Returns:
        Dictionary with write results

    Raises:
        AtomicWriteError: If serialization or the write fails
    """
    try:
        # Serialize first to catch errors before touching the filesystem
        json_content = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as e:
        raise AtomicWriteError(f"JSON serialization failed: {e}")

    return write_text_atomic(json_content, output_path)
