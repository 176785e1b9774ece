from __future__ import annotations

import asyncio
import io
import re
from pathlib import Path
from typing import Final

import polars as pl
import requests

Cell = str | int | float | bool | None
Row = dict[str, Cell]

REQUEST_TIMEOUT: Final = (5, 10)
_NUMBER_RE = re.compile(r"\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*")
_MAX_SAFE_NUMBER = 2**53
_TRUE_TEXT = {"true", "TRUE"}
_FALSE_TEXT = {"false", "FALSE"}


def coerce_cell(text: str | None) -> Cell:
    """Type one CSV cell: empty -> None, true/false -> bool, numbers -> int/float.

    Numbers beyond the safe float range stay as text so long identifiers
    survive unchanged.
    """
    if text is None or text == "":
        return None
    if text in _TRUE_TEXT:
        return True
    if text in _FALSE_TEXT:
        return False
    match = _NUMBER_RE.fullmatch(text)
    if match is None:
        return text
    number = float(text)
    if abs(number) >= _MAX_SAFE_NUMBER:
        return text
    if "." in text or match.group(2):
        return number
    return int(text)


def _fetch(url: str) -> bytes:
    response = requests.get(url, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    return response.content


def read_rows(path: str | Path) -> list[Row]:
    """Read a CSV file or http(s) URL into one dict per non-blank line.

    Lines with extra fields are cut to the header width, short lines are padded
    with None, and undecodable bytes become U+FFFD. Rows whose every cell is
    empty are skipped, delimiter-only lines such as ``,,`` included.
    """
    source = str(path)
    options = {
        "infer_schema_length": 0,
        "raise_if_empty": False,
        "truncate_ragged_lines": True,
        "encoding": "utf8-lossy",
    }
    if source.startswith(("http://", "https://")):
        frame = pl.read_csv(io.BytesIO(_fetch(source)), **options)
    else:
        frame = pl.read_csv(source, **options)

    rows: list[Row] = []
    for record in frame.iter_rows(named=True):
        row = {column: coerce_cell(value) for column, value in record.items()}
        if any(cell is not None for cell in row.values()):
            rows.append(row)
    return rows


class RowCache:
    """Parsed rows keyed by source path.

    Entries are added on the first successful load of a path and are never
    evicted; build a new instance to read sources again. Two concurrent first
    loads of the same path both read the source.
    """

    def __init__(self) -> None:
        self._rows: dict[str, list[Row]] = {}

    def __contains__(self, path: object) -> bool:
        return str(path) in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def get(self, path: str | Path) -> list[Row] | None:
        return self._rows.get(str(path))

    async def load(self, path: str | Path) -> list[Row]:
        key = str(path)
        cached = self._rows.get(key)
        if cached is not None:
            return cached
        rows = await asyncio.to_thread(read_rows, key)
        self._rows[key] = rows
        return rows


_DEFAULT_CACHE = RowCache()


async def load_csv(path: str | Path, cache: RowCache | None = None) -> list[Row]:
    """Load ``path`` once per cache; later calls return the same list object.

    Read and parse errors propagate unchanged and nothing is cached for them.
    """
    if cache is None:
        cache = _DEFAULT_CACHE
    return await cache.load(path)
