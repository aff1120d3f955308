"""Darwin Core occurrence loading.

Reads a Darwin Core Archive (zip containing ``occurrence.txt``) or a plain
CSV/TSV export in chunks, keeps only the columns the pipeline needs, drops
malformed rows, and filters to the configured date window and regions.

Drop reasons, in the order they are applied:
  - ``missing_taxon``: no scientific name
  - ``bad_date``: no parseable event date
  - ``outside_dates``: event date outside ``start_date``..``end_date``
  - ``outside_regions``: region in neither the narrow nor the broad list
"""

from __future__ import annotations

import csv
import zipfile
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from flowering_phenology.datasources.occurrences.annotations import is_flowering
from flowering_phenology.datasources.occurrences.models import LoadReport, Occurrence

if TYPE_CHECKING:
    from flowering_phenology.config import PipelineConfig

OCCURRENCE_MEMBER = "occurrence.txt"
CHUNK_SIZE = 100_000

NAME_COLUMNS = ("species", "scientificName")
DATE_COLUMN = "eventDate"
ANNOTATION_COLUMN = "reproductiveCondition"
ID_COLUMNS = ("gbifID", "id", "occurrenceID")
OPTIONAL_COLUMNS = ("family", ANNOTATION_COLUMN)


def _wanted_columns(region_column: str) -> frozenset[str]:
    return frozenset(
        (*NAME_COLUMNS, DATE_COLUMN, region_column, *ID_COLUMNS, *OPTIONAL_COLUMNS)
    )


def read_occurrence_frames(
    path: Path,
    region_column: str = "stateProvince",
    *,
    chunksize: int = CHUNK_SIZE,
) -> Iterator[pd.DataFrame]:
    """Yield DataFrame chunks of the occurrence table, all values as strings.

    Zip files are treated as Darwin Core Archives and must contain
    ``occurrence.txt`` (tab-delimited). ``.csv`` files are comma-delimited,
    anything else is read as tab-delimited.
    """
    if not path.exists():
        msg = f"Occurrence file not found: {path}"
        raise FileNotFoundError(msg)

    wanted = _wanted_columns(region_column)
    read_opts = {
        "dtype": str,
        "keep_default_na": False,
        "usecols": lambda c: c in wanted,
        "chunksize": chunksize,
        "on_bad_lines": "skip",
    }

    if zipfile.is_zipfile(path):
        with zipfile.ZipFile(path) as archive:
            member = _find_member(archive, OCCURRENCE_MEMBER)
            with archive.open(member) as handle:
                yield from pd.read_csv(handle, sep="\t", quoting=csv.QUOTE_NONE, **read_opts)
        return

    sep = "," if path.suffix.lower() == ".csv" else "\t"
    quoting = csv.QUOTE_MINIMAL if sep == "," else csv.QUOTE_NONE
    yield from pd.read_csv(path, sep=sep, quoting=quoting, **read_opts)


def _find_member(archive: zipfile.ZipFile, name: str) -> str:
    for member in archive.namelist():
        if Path(member).name.lower() == name:
            return member
    msg = f"Archive {archive.filename} has no {name}"
    raise ValueError(msg)


def load_occurrences(
    path: Path,
    config: PipelineConfig,
    *,
    chunksize: int = CHUNK_SIZE,
) -> tuple[list[Occurrence], LoadReport]:
    """
    Load and filter occurrence records.

    Args:
        path: DwC-A zip, CSV or TSV file.
        config: Run configuration (date window, region lists, region column).
        chunksize: Rows per pandas chunk.

    Returns:
        Retained occurrences in file order, and the row counters.
    """
    report = LoadReport()
    records: list[Occurrence] = []
    for chunk in read_occurrence_frames(path, config.region_column, chunksize=chunksize):
        _check_columns(chunk, config.region_column)
        records.extend(_chunk_to_occurrences(chunk, config, report, seq_start=report.rows_read))
        report.rows_read += len(chunk)
    report.rows_kept = len(records)
    return records, report


def _check_columns(chunk: pd.DataFrame, region_column: str) -> None:
    missing = []
    if not any(c in chunk.columns for c in NAME_COLUMNS):
        missing.append(" or ".join(NAME_COLUMNS))
    for column in (DATE_COLUMN, region_column):
        if column not in chunk.columns:
            missing.append(column)
    if missing:
        msg = f"Occurrence table is missing required columns: {', '.join(missing)}"
        raise ValueError(msg)


def _taxon_names(chunk: pd.DataFrame) -> pd.Series:
    """Prefer the species-level ``species`` column, fall back to ``scientificName``."""
    names = pd.Series("", index=chunk.index, dtype=object)
    for column in reversed(NAME_COLUMNS):
        if column in chunk.columns:
            values = chunk[column].str.strip()
            names = values.where(values != "", names)
    return names


def _event_dates(raw: pd.Series) -> pd.Series:
    """Parse DwC ``eventDate`` values; intervals keep their start date."""
    start = raw.str.strip().str.split("/").str[0]
    parsed = pd.to_datetime(start.str.slice(0, 10), errors="coerce", format="%Y-%m-%d")
    retry = parsed.isna() & (start != "")
    if retry.any():
        fallback = pd.to_datetime(start[retry], errors="coerce", format="mixed", utc=True)
        parsed[retry] = fallback.dt.tz_localize(None)
    return parsed


def _record_ids(chunk: pd.DataFrame, seq_start: int) -> pd.Series:
    ids = pd.Series(
        [str(i) for i in range(seq_start, seq_start + len(chunk))], index=chunk.index
    )
    for column in reversed(ID_COLUMNS):
        if column in chunk.columns:
            values = chunk[column].str.strip()
            ids = values.where(values != "", ids)
    return ids


def _chunk_to_occurrences(
    chunk: pd.DataFrame,
    config: PipelineConfig,
    report: LoadReport,
    *,
    seq_start: int,
) -> list[Occurrence]:
    names = _taxon_names(chunk)
    dates = _event_dates(chunk[DATE_COLUMN])
    # Canonicalize to the configured spelling so counts can compare exactly
    canonical = {r.casefold(): r for r in config.retained_regions}
    regions = chunk[config.region_column].str.strip().str.casefold().map(canonical)

    keep = names != ""
    report.drop("missing_taxon", int((~keep).sum()))

    has_date = dates.notna()
    report.drop("bad_date", int((keep & ~has_date).sum()))
    keep &= has_date

    in_window = pd.Series(True, index=chunk.index)
    if config.start_date is not None:
        in_window &= dates >= pd.Timestamp(config.start_date)
    if config.end_date is not None:
        in_window &= dates <= pd.Timestamp(config.end_date)
    report.drop("outside_dates", int((keep & ~in_window).sum()))
    keep &= in_window

    in_region = regions.notna()
    report.drop("outside_regions", int((keep & ~in_region).sum()))
    keep &= in_region

    if ANNOTATION_COLUMN in chunk.columns:
        flowering = chunk[ANNOTATION_COLUMN].map(is_flowering)
    else:
        flowering = pd.Series(False, index=chunk.index)

    if "family" in chunk.columns:
        families = chunk["family"].str.strip()
    else:
        families = pd.Series("", index=chunk.index)
    ids = _record_ids(chunk, seq_start)
    positions = pd.Series(range(seq_start, seq_start + len(chunk)), index=chunk.index)

    kept = chunk.index[keep]
    return [
        Occurrence(
            record_id=ids[i],
            seq=int(positions[i]),
            scientific_name=names[i],
            event_date=dates[i].date(),
            region=regions[i],
            flowering=bool(flowering[i]),
            family=families[i],
        )
        for i in kept
    ]
