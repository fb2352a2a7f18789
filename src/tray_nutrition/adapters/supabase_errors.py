"""Translate Supabase client failures into domain errors."""

from collections.abc import Iterator
from contextlib import contextmanager

import httpx
from postgrest.exceptions import APIError

from tray_nutrition.domain.errors import DataSourceError


@contextmanager
def data_source(action: str) -> Iterator[None]:
    """Re-raise PostgREST and transport errors as `DataSourceError`."""
    try:
        yield
    except (APIError, httpx.HTTPError) as exc:
        raise DataSourceError(f"{action} failed: {exc}") from exc


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
