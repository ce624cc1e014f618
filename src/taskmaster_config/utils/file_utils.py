"""File system utilities for taskmaster-config."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

import yaml

from taskmaster_config.config.paths import JSON_SUFFIXES, TASKMASTER_DIR, TEMP_SUFFIX
from taskmaster_config.constants import JSON_INDENT


def ensure_dir(path: Path) -> None:
    """Ensure directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists
    """
    path.mkdir(parents=True, exist_ok=True)


def file_exists(path: Path) -> bool:
    """Check if file exists.

    Args:
        path: Path to check

    Returns:
        True if file exists, False otherwise
    """
    return path.exists() and path.is_file()


def delete_file(path: Path) -> bool:
    """Delete a file if it exists.

    Args:
        path: Path to file to delete

    Returns:
        True if file was deleted, False if it didn't exist
    """
    if path.exists():
        path.unlink()
        return True
    return False


def copy_file(src: Path, dst: Path) -> None:
    """Copy a file, creating the destination directory.

    Raises:
        FileNotFoundError: If source file doesn't exist
    """
    if not src.exists():
        raise FileNotFoundError(f"Source file not found: {src}")

    ensure_dir(dst.parent)
    shutil.copy2(src, dst)


def is_json_path(path: Path) -> bool:
    """Check whether a document path is stored as JSON rather than YAML."""
    return path.suffix.lower() in JSON_SUFFIXES


def read_document(path: Path) -> Any:
    """Read and parse a YAML or JSON document.

    The format is chosen from the file suffix. An empty file parses as an
    empty mapping.

    Args:
        path: Path to document

    Returns:
        Parsed document (normally a dict)

    Raises:
        FileNotFoundError: If file doesn't exist
        OSError: If file can't be read
        yaml.YAMLError / json.JSONDecodeError: If the document is invalid
    """
    with open(path, encoding="utf-8") as f:
        text = f.read()

    if not text.strip():
        return {}
    if is_json_path(path):
        return json.loads(text)
    data = yaml.safe_load(text)
    return data if data is not None else {}


def dump_document(data: dict[str, Any], path: Path) -> str:
    """Serialize a document in the format implied by ``path``.

    Key order is preserved as given so that rewriting a file only changes
    the lines that actually changed. Short lists are kept inline.
    """
    if is_json_path(path):
        return json.dumps(data, indent=JSON_INDENT, ensure_ascii=False) + "\n"

    class InlineListDumper(yaml.SafeDumper):
        pass

    def represent_list(dumper: yaml.SafeDumper, items: list[Any]) -> yaml.nodes.Node:
        # Keep short lists (<=3 items) inline, longer ones multi-line
        if len(items) <= 3:
            return dumper.represent_sequence("tag:yaml.org,2002:seq", items, flow_style=True)
        return dumper.represent_sequence("tag:yaml.org,2002:seq", items, flow_style=False)

    InlineListDumper.add_representer(list, represent_list)

    return yaml.dump(
        data,
        Dumper=InlineListDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def atomic_write_text(path: Path, content: str) -> None:
    """Write text so readers never observe a partially written file.

    Content goes to a temporary file in the destination directory, is
    flushed to disk, then moved over the destination with ``os.replace``.
    The temporary file is removed if anything fails.

    Raises:
        OSError: If the directory or file cannot be written
    """
    ensure_dir(path.parent)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=TEMP_SUFFIX, dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def get_project_root(start_path: Path | None = None) -> Path | None:
    """Find project root by looking for a .taskmaster directory.

    Args:
        start_path: Path to start searching from (defaults to current directory)

    Returns:
        Project root path if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    # Search up the directory tree
    for parent in [current] + list(current.parents):
        tm_dir = parent / TASKMASTER_DIR
        if tm_dir.exists() and tm_dir.is_dir():
            return parent

    return None
