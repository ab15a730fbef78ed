"""Small operating-system helpers: temporary paths, directories, process id."""

from __future__ import annotations

import functools
import os
import sys
import tempfile

_TEMP_VARIABLES = ("TMPDIR", "TMP", "TEMPDIR", "TEMP")


def _remove_ending_separator(path: str) -> str:
    return path[:-1] if path.endswith("/") else path


def _is_windows() -> bool:
    return sys.platform == "win32"


@functools.cache
def get_temp_directory_path() -> str:
    """Return the temporary directory, without a trailing separator.

    The value is computed once and cached.
    """
    if _is_windows():
        path = tempfile.gettempdir().replace("\\", "/")
        return path.rstrip("/")
    for name in _TEMP_VARIABLES:
        value = os.environ.get(name)
        if value is not None:
            return _remove_ending_separator(value)
    return "/tmp"


def create_directory(path: str) -> bool:
    """Create ``path`` and its missing parents with mode 0700.

    Parents are split on "/". Returns True when the directory was created,
    or already exists on POSIX systems, and False when it could not be made.
    """
    pos = path.rfind("/")
    if pos > 0:
        create_directory(path[:pos])

    if _is_windows():
        try:
            os.mkdir(path)
        except OSError:
            return False
        return True

    if os.path.lexists(path):
        return True
    try:
        os.mkdir(path, 0o700)
    except OSError:
        return False
    return True


def get_current_pid() -> int:
    """Return the id of the running process."""
    return os.getpid()


def get_cell_tmp_file(prefix: str, execution_count: int, extension: str) -> str:
    """Return the file name used to store the code of one executed cell."""
    return f"{prefix}/[{execution_count}]{extension}"