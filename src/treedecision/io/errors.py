from __future__ import annotations

"""Errors raised while reading or writing tree files."""

import os
from pathlib import Path
from typing import Iterable, Union

from pydantic import ValidationError

_MAX_DETAILS = 3


class LoaderError(RuntimeError):
    """Wraps tree file failures with the offending path."""

    def __init__(self, file_path: Union[str, Path], message: str, *, cause: Exception | None = None):
        self.file_path = str(file_path)
        self.message = message
        self.cause = cause
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        base = f"{self.message} ({self._display_path(self.file_path)})"
        if isinstance(self.cause, ValidationError):
            return f"{base}: {self._format_validation_errors(self.cause.errors())}"
        if self.cause:
            return f"{base}: {self.cause}"
        return base

    @staticmethod
    def _display_path(path: str) -> str:
        if path.startswith("<"):
            return path
        try:
            return os.path.relpath(path)
        except ValueError:  # pragma: no cover - other drive on Windows
            return path

    @staticmethod
    def _format_validation_errors(errors: Iterable[dict]) -> str:
        # e.g. "nodes.root.type: Input should be 'decision', 'chance' or 'leaf'"
        error_list = list(errors)
        snippets = []
        for err in error_list[:_MAX_DETAILS]:
            loc = ".".join(str(entry) for entry in err.get("loc", [])) or "<root>"
            snippets.append(f"{loc}: {err.get('msg') or err.get('type') or 'invalid value'}")
        if len(error_list) > _MAX_DETAILS:
            snippets.append(f"... ({len(error_list) - _MAX_DETAILS} more)")
        return "; ".join(snippets)

    def __str__(self) -> str:
        return self._build_message()
