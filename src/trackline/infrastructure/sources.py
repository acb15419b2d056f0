"""Row sources — where raw event rows come from.

A source is anything with an async ``fetch()`` returning a list of
string-keyed rows.  Fetching is the only asynchronous step of a draw
cycle; the CLI resolves it with :func:`load_rows` before the synchronous
pipeline runs.  Timeouts and transport failures are the source's concern
and surface as :class:`~trackline.domain.errors.SourceUnavailableError`.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import anyio
import httpx

from trackline.domain.errors import SourceUnavailableError

if TYPE_CHECKING:
    from trackline.config.models import SourceConfig

logger = logging.getLogger(__name__)

SPREADSHEET_CSV_URL = "https://docs.google.com/spreadsheets/d/{key}/export?format=csv"

type Row = dict[str, str]


class RowSource(Protocol):
    """Async supplier of raw rows."""

    @property
    def description(self) -> str: ...

    async def fetch(self) -> list[Row]: ...


def parse_csv(text: str) -> list[Row]:
    """Parse delimited text with a header row into dict rows.

    A leading BOM is dropped.  Cells past the header width are discarded;
    missing trailing cells come back as empty strings.
    """
    reader = csv.DictReader(io.StringIO(text.removeprefix("\ufeff")))
    return [
        {key: (value or "") for key, value in row.items() if key is not None}
        for row in reader
    ]


@dataclass(frozen=True)
class CsvFileSource:
    """Rows from a local CSV file."""

    path: Path

    @property
    def description(self) -> str:
        return f"csv:{self.path}"

    async def fetch(self) -> list[Row]:
        try:
            text = await anyio.Path(self.path).read_text(encoding="utf-8")
        except OSError as exc:
            raise SourceUnavailableError(
                f"Cannot read CSV file {self.path}: {exc.strerror or exc}",
                path=str(self.path),
            ) from exc
        rows = parse_csv(text)
        logger.debug("Read %d row(s) from %s", len(rows), self.path)
        return rows


@dataclass(frozen=True)
class SpreadsheetSource:
    """Rows from a published spreadsheet, fetched as CSV over HTTP."""

    key: str
    timeout: float = 15.0
    transport: httpx.AsyncBaseTransport | None = field(default=None, compare=False, repr=False)

    @property
    def url(self) -> str:
        return SPREADSHEET_CSV_URL.format(key=self.key)

    @property
    def description(self) -> str:
        return f"spreadsheet:{self.key}"

    async def fetch(self) -> list[Row]:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                resp = await client.get(self.url)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(
                f"Cannot fetch spreadsheet {self.key}: {exc}",
                key=self.key,
                url=self.url,
            ) from exc
        rows = parse_csv(resp.text)
        logger.debug("Fetched %d row(s) from spreadsheet %s", len(rows), self.key)
        return rows


def open_source(
    config: SourceConfig,
    *,
    csv_file: Path | None = None,
    spreadsheet_key: str | None = None,
    base_dir: Path | None = None,
) -> RowSource:
    """Pick the row source for this invocation.

    CLI arguments win over configuration; within each, a spreadsheet key
    wins over a CSV file.  A relative configured CSV path is resolved
    against *base_dir* (the directory of the config file).

    Raises:
        SourceUnavailableError: if no source is given anywhere.
    """
    if spreadsheet_key:
        return SpreadsheetSource(key=spreadsheet_key, timeout=config.timeout)
    if csv_file:
        return CsvFileSource(path=csv_file)
    if config.spreadsheet_key:
        return SpreadsheetSource(key=config.spreadsheet_key, timeout=config.timeout)
    if config.csv_file:
        path = config.csv_file
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return CsvFileSource(path=path)
    raise SourceUnavailableError(
        "No row source configured; pass --csv or --spreadsheet, or set [source] in trackline.toml"
    )


def load_rows(source: RowSource) -> list[Row]:
    """Run the source's fetch to completion and return its rows."""
    logger.debug("Loading rows from %s", source.description)
    return anyio.run(source.fetch)
