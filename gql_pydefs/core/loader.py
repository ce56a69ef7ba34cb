"""Schema source loading.

Resolves glob patterns to schema files and merges their contents, plus any
inline SDL fragments, into one SDL string.
"""

import asyncio
import glob
import os
from collections.abc import Sequence

from .errors import ConfigurationError


def expand_patterns(paths: Sequence[str]) -> list[str]:
    """Resolve patterns to files, in pattern order, sorted within a pattern.

    A file matched by several patterns is kept at its first position.
    """
    seen: set[str] = set()
    files = []
    for pattern in paths:
        matches = sorted(
            os.path.abspath(p)
            for p in glob.glob(os.path.expanduser(pattern), recursive=True)
            if os.path.isfile(p)
        )
        for file_path in matches:
            if file_path not in seen:
                seen.add(file_path)
                files.append(file_path)
    return files


def extend_type_defs(
    type_path_defs: str | None, type_defs: str | Sequence[str] | None = None
) -> str | None:
    """Append inline SDL fragments after the file-derived SDL."""
    if not type_defs:
        return type_path_defs
    fragments = [type_defs] if isinstance(type_defs, str) else list(type_defs)
    parts = ([type_path_defs] if type_path_defs else []) + fragments
    return "\n".join(parts)


class TypesLoader:
    """Reads and merges schema files matched by glob patterns."""

    async def merge_types_by_paths(self, paths: Sequence[str] | None) -> str:
        """Return the concatenated contents of every file matched by ``paths``.

        Patterns that match nothing contribute nothing.
        """
        if not paths:
            raise ConfigurationError('"typePaths" property cannot be empty.')
        return await asyncio.to_thread(self._read_files, list(paths))

    def _read_files(self, paths: list[str]) -> str:
        contents = []
        for file_path in expand_patterns(paths):
            try:
                with open(file_path, encoding="utf-8") as f:
                    contents.append(f.read())
            except (OSError, UnicodeDecodeError) as e:
                raise ConfigurationError(f"Cannot read schema file {file_path}: {e}") from e
        return "\n".join(contents)
