"""
Atomic file operations for the document store.

Writes go to a temporary file in the target's directory which is then renamed
over the target, so a crash mid-write leaves either the old document or the
new one on disk, never a truncated mix.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger


def atomic_write_text(
    file_path: Union[str, Path],
    content: str,
    encoding: str = 'utf-8',
    mode: int = 0o600
) -> None:
    """
    Write text content to a file atomically.

    Args:
        file_path: Path to the target file
        content: Text content to write
        encoding: Text encoding (default: utf-8)
        mode: File permissions (default: 0o600, the store is private to the user)

    Raises:
        OSError: If the write or rename operation fails
    """
    file_path = Path(file_path)
    parent_dir = file_path.parent
    parent_dir.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        fd, temp_path = tempfile.mkstemp(
            dir=parent_dir,
            prefix=f".{file_path.name}.",
            suffix=".tmp",
            text=True
        )
        with os.fdopen(fd, 'w', encoding=encoding) as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(temp_path, mode)
        # os.replace is atomic on POSIX and best-effort on Windows
        os.replace(temp_path, str(file_path))

        logger.debug(f"Atomically wrote {len(content)} chars to {file_path}")

    except OSError as e:
        if temp_path and os.path.exists(temp_path):
            try:
                os.unlink(temp_path)
            except OSError:
                pass
        logger.error(f"Failed to atomically write to {file_path}: {e}")
        raise


def atomic_write_json(
    file_path: Union[str, Path],
    data: Dict[str, Any],
    encoding: str = 'utf-8',
    indent: Optional[int] = 2
) -> None:
    """
    Serialize `data` as JSON and write it atomically.

    Raises:
        OSError: If the write or rename operation fails
        TypeError: If the data cannot be serialized to JSON
    """
    content = json.dumps(data, indent=indent, ensure_ascii=False)
    atomic_write_text(file_path, content, encoding=encoding)


def read_json_file(
    file_path: Union[str, Path],
    default: Optional[Dict[str, Any]] = None,
    encoding: str = 'utf-8'
) -> Optional[Dict[str, Any]]:
    """
    Read a JSON document, returning `default` when the file does not exist.

    Raises:
        OSError: If the file exists but cannot be read
        json.JSONDecodeError: If the file is not valid JSON
    """
    file_path = Path(file_path)
    if not file_path.exists():
        return default
    with open(file_path, 'r', encoding=encoding) as f:
        return json.load(f)
