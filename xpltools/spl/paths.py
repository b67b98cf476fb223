"""File name handling for the SPL compiler."""

from __future__ import annotations

import os
from typing import Mapping, Optional


def expand_path(path: str, env: Optional[Mapping[str, str]] = None) -> str:
    """Replace a leading ``$NAME`` path component by its environment value."""
    environ = os.environ if env is None else env
    first, slash, rest = path.partition("/")
    name = first[1:]
    value = environ.get(name) if name else None
    head = value if value is not None else first
    return f"{head}/{rest}" if slash else head


def remove_extension(pathname: str) -> str:
    """Cut everything after the last dot, keeping the dot."""
    head, dot, _ = pathname.rpartition(".")
    return head + dot


def output_filename(inpfname: str) -> str:
    """Name of the assembled output file for a source file."""
    return remove_extension(inpfname) + "xsm"