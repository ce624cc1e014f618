"""Utility functions for taskmaster-config."""

from taskmaster_config.utils.console import (
    console,
    print_error,
    print_info,
    print_panel,
    print_success,
    print_warning,
)
from taskmaster_config.utils.dict_utils import (
    delete_nested,
    flatten,
    get_nested,
    set_nested,
    unflatten,
)
from taskmaster_config.utils.file_utils import (
    atomic_write_text,
    copy_file,
    delete_file,
    dump_document,
    ensure_dir,
    file_exists,
    get_project_root,
    read_document,
)

__all__ = [
    "atomic_write_text",
    "console",
    "copy_file",
    "delete_file",
    "delete_nested",
    "dump_document",
    "ensure_dir",
    "file_exists",
    "flatten",
    "get_nested",
    "get_project_root",
    "print_error",
    "print_info",
    "print_panel",
    "print_success",
    "print_warning",
    "read_document",
    "set_nested",
    "unflatten",
]
