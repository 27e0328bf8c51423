"""
Two-row header handling for CSV sources.

Some statistical offices split one logical column name over two physical
rows, e.g. ``Erststimmen`` on the first row and ``Anzahl`` / ``gültig``
below it. The helpers here read both rows, normalize their labels, merge
them position by position and label the data table with the result.
"""
from __future__ import annotations

import logging
import re
import unicodedata
from collections import Counter
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Union

import pandas as pd

from .constants import DEFAULT_SENTINEL, HEADER_SEPARATOR
from .errors import DuplicateHeaderError, LengthMismatchError, SourceReadError

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# Characters NFKD decomposition does not reduce to ASCII
_TRANSLITERATE = {"ß": "ss", "æ": "ae", "ø": "o", "œ": "oe", "ł": "l", "đ": "d"}


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def clean_label(
    label,
    sentinel: str = DEFAULT_SENTINEL,
    sep: str = HEADER_SEPARATOR,
) -> str:
    """
    Normalize a raw column label.

    Parameters
    ----------
    label : str or None
        Raw label as found in the source. NaN/None count as blank.
    sentinel : str, optional
        Token returned for a blank label (default: ``"x"``)
    sep : str, optional
        Separator replacing runs of non-alphanumeric characters (default: ``"_"``)

    Returns
    -------
    str
        Lower-case ASCII label with the trailing numeric disambiguator removed

    Examples
    --------
    >>> clean_label("Gültig")
    'gultig'
    >>> clean_label("B_1")
    'b'
    >>> clean_label("")
    'x'
    """
    if label is None or (not isinstance(label, str) and pd.isna(label)):
        return sentinel

    text = str(label).strip().lower()
    for char, replacement in _TRANSLITERATE.items():
        text = text.replace(char, replacement)
    text = _strip_accents(text)
    text = _NON_ALNUM.sub(sep, text).strip(sep)

    # Drop "<sep><digits>..." appended by parsers to make names unique
    text = re.sub(re.escape(sep) + r"\d+.*$", "", text)

    return text or sentinel


def extract_header_row(
    source_path: Union[str, Path],
    skip_rows: int,
    row_count: int = 1,
    sep: str = ",",
    encoding: str = "utf-8",
    sentinel: str = DEFAULT_SENTINEL,
) -> List[str]:
    """
    Read one physical header row and return its normalized labels.

    Parameters
    ----------
    source_path : str or Path
        Delimited text file
    skip_rows : int
        Number of leading rows discarded before reading
    row_count : int, optional
        Number of rows parsed after the skipped ones (default: 1). Labels
        come from the first of them.
    sep : str, optional
        Field delimiter (default: ``","``)
    encoding : str, optional
        Text encoding of the source (default: ``"utf-8"``)
    sentinel : str, optional
        Token used for blank cells (default: ``"x"``)

    Returns
    -------
    list of str
        One normalized label per column position

    Raises
    ------
    SourceReadError
        If the source cannot be read or ``skip_rows`` reaches past its end
    ValueError
        If ``skip_rows`` is negative or ``row_count`` is below 1
    """
    return read_header_rows(
        source_path, skip_rows, row_count=row_count, sep=sep, encoding=encoding, sentinel=sentinel,
    )[0]


def read_header_rows(
    source_path: Union[str, Path],
    skip_rows: int,
    row_count: int = 2,
    sep: str = ",",
    encoding: str = "utf-8",
    sentinel: str = DEFAULT_SENTINEL,
) -> List[List[str]]:
    """
    Read ``row_count`` header rows in one pass and normalize every label.

    The rows share one column count: a blank or trimmed row is padded with
    sentinels up to the widest row, so a physically empty second header row
    yields all sentinels instead of being skipped.

    Raises
    ------
    SourceReadError
        If the source cannot be read or ``skip_rows`` reaches past its end
    ValueError
        If ``skip_rows`` is negative or ``row_count`` is below 1
    """
    if skip_rows < 0:
        raise ValueError(f"skip_rows must be non-negative, got {skip_rows}")
    if row_count < 1:
        raise ValueError(f"row_count must be at least 1, got {row_count}")

    source_path = Path(source_path)
    try:
        # header=None keeps pandas from mangling duplicate names ("B.1")
        rows = pd.read_csv(
            source_path,
            sep=sep,
            skiprows=skip_rows,
            nrows=row_count,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            encoding=encoding,
        )
    except pd.errors.EmptyDataError as e:
        raise SourceReadError(
            f"{source_path}: no rows left after skipping {skip_rows}"
        ) from e
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise SourceReadError(f"cannot read header from {source_path}: {e}") from e

    if rows.empty:
        raise SourceReadError(f"{source_path}: no rows left after skipping {skip_rows}")

    labels = [
        [clean_label(value, sentinel=sentinel) for value in row]
        for row in rows.itertuples(index=False, name=None)
    ]
    logger.debug(f"Header rows after {skip_rows} skipped rows of {source_path.name}: {labels}")
    return labels


def merge_headers(
    row1: Sequence[str],
    row2: Sequence[str],
    sentinel: str = DEFAULT_SENTINEL,
    sep: str = HEADER_SEPARATOR,
) -> List[str]:
    """
    Merge two aligned header rows into one label per column.

    Where ``row2[i]`` is the sentinel the label is ``row1[i]``, otherwise it
    is ``row1[i] + sep + row2[i]``. The result is not checked for uniqueness.

    Raises
    ------
    LengthMismatchError
        If the rows differ in length
    """
    if len(row1) != len(row2):
        raise LengthMismatchError(len(row1), len(row2), what="header row")

    return [
        first if second == sentinel else f"{first}{sep}{second}"
        for first, second in zip(row1, row2)
    ]


def check_unique_headers(header: Sequence[str]) -> None:
    """Raise DuplicateHeaderError if any label occurs more than once."""
    duplicates = [label for label, n in Counter(header).items() if n > 1]
    if duplicates:
        raise DuplicateHeaderError(duplicates)


def apply_header(
    table: pd.DataFrame,
    header: Sequence[str],
    require_unique: bool = False,
) -> pd.DataFrame:
    """
    Return a copy of ``table`` with its columns relabelled positionally.

    Parameters
    ----------
    table : pd.DataFrame
        Data table whose current column labels are replaced
    header : sequence of str
        New labels, one per column
    require_unique : bool, optional
        Raise DuplicateHeaderError on repeated labels (default: False)

    Raises
    ------
    LengthMismatchError
        If the table's column count differs from ``len(header)``
    """
    if table.shape[1] != len(header):
        raise LengthMismatchError(len(header), table.shape[1], what="table column")

    if require_unique:
        check_unique_headers(header)
    elif len(set(header)) != len(header):
        logger.warning(f"Header contains duplicate labels: {list(header)}")

    labelled = table.copy()
    labelled.columns = list(header)
    return labelled


def read_data_rows(
    source_path: Union[str, Path],
    skip_rows: int,
    sep: str = ",",
    encoding: str = "utf-8",
    n_columns: Optional[int] = None,
) -> pd.DataFrame:
    """
    Read the data rows below a header as strings, without column names.

    Parameters
    ----------
    source_path : str or Path
        Delimited text file
    skip_rows : int
        Rows above the data (title lines and header rows)
    sep : str, optional
        Field delimiter
    encoding : str, optional
        Text encoding of the source
    n_columns : int, optional
        Column count of the empty table returned when no data rows follow

    Raises
    ------
    SourceReadError
        If the source cannot be read
    """
    try:
        data = pd.read_csv(
            source_path,
            sep=sep,
            skiprows=skip_rows,
            header=None,
            dtype=str,
            skip_blank_lines=False,
            encoding=encoding,
        )
    except pd.errors.EmptyDataError:
        logger.warning(f"{Path(source_path).name} has no data rows after row {skip_rows}")
        data = pd.DataFrame(columns=range(n_columns or 0))
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise SourceReadError(f"cannot read data rows from {source_path}: {e}") from e

    # Blank lines are kept while reading so skip_rows counts physical lines
    data = data.dropna(how="all").reset_index(drop=True)

    logger.info(f"Read {len(data):,} rows x {data.shape[1]} columns from {Path(source_path).name}")
    return data


def read_two_row_header_csv(
    source_path: Union[str, Path],
    header_skip: int,
    sep: str = ",",
    encoding: str = "utf-8",
    sentinel: str = DEFAULT_SENTINEL,
    require_unique: bool = False,
    header_overrides: Optional[Mapping[int, str]] = None,
) -> pd.DataFrame:
    """
    Read a CSV whose column names span rows ``header_skip`` and ``header_skip + 1``.

    Data rows start right after the second header row and are read as
    strings; convert numeric columns afterwards (see ``reshape.to_numeric``).
    ``header_overrides`` maps column positions to labels that replace the
    merged ones before the header is applied, e.g. to name repeated columns.

    Examples
    --------
    >>> table = read_two_row_header_csv("btw21_kerg.csv", header_skip=4, sep=";")
    >>> table.columns[:4].tolist()
    ['gebiet', 'gebiet', 'erststimmen_anzahl', 'erststimmen_gultig']
    """
    rows = read_header_rows(source_path, header_skip, row_count=2, sep=sep, encoding=encoding, sentinel=sentinel)
    if len(rows) < 2:
        raise SourceReadError(f"{source_path}: second header row missing after row {header_skip}")
    header = merge_headers(rows[0], rows[1], sentinel=sentinel)
    for position, label in (header_overrides or {}).items():
        header[position] = label
    logger.info(f"Merged header of {Path(source_path).name}: {header}")

    data = read_data_rows(source_path, header_skip + 2, sep=sep, encoding=encoding, n_columns=len(header))
    return apply_header(data, header, require_unique=require_unique)
