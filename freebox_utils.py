from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Hashable, Mapping, Optional

DEFAULT_MAX_WORKERS = 8


def opt_int(value) -> Optional[int]:
    """int or None, never 0 for a missing value."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def opt_bool(value) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, str)):
        return to_bool(value)
    return None


def to_bool(s) -> bool:
    if isinstance(s, str):
        return s.strip().lower() in ("1", "true", "yes")
    return bool(int(s))


def opt_str(value) -> str:
    return "" if value is None else str(value)


def lower(s: Optional[str]) -> str:
    return (s or "").lower()


def run_concurrently(tasks: Mapping[Hashable, Callable[[], Any]],
                     max_workers: int = DEFAULT_MAX_WORKERS) -> dict[Hashable, Any]:
    """
    Run every task on its own worker and wait for all of them.

    Returns a dict with the same keys holding either the task result or the
    exception it raised.
    """
    results: dict[Hashable, Any] = {}
    if not tasks:
        return results
    workers = max(1, min(max_workers, len(tasks)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {key: executor.submit(task) for key, task in tasks.items()}
        for key, future in futures.items():
            try:
                results[key] = future.result()
            except Exception as e:
                results[key] = e
    return results
