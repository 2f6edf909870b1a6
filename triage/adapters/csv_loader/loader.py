"""CSV loader — reads dataset files into domain entities."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path

from triage.adapters.csv_loader.normalizer import (
    clean_string,
    normalize_building,
    normalize_column_name,
    parse_date,
    parse_int,
    parse_skills,
)
from triage.domain.entities.manager import Manager
from triage.domain.entities.office import Office
from triage.domain.entities.ticket import Ticket

logger = logging.getLogger(__name__)

DUPLICATE_SUFFIX = "__dup"

OFFICE_STEMS = ["business_units", "business", "units", "offices", "офисы", "филиалы"]
MANAGER_STEMS = ["managers", "менеджеры", "сотрудники"]
TICKET_STEMS = ["tickets", "заявки", "тикеты", "обращения"]


@dataclass
class Dataset:
    tickets: list[Ticket]
    managers: list[Manager]
    offices: list[Office]


def _sniff_dialect(sample: str) -> type[csv.Dialect]:
    """Detect the delimiter (comma/semicolon/tab) to support Excel RU exports."""
    if not sample:
        return csv.excel

    first_line = sample.splitlines()[0]
    counts = {d: first_line.count(d) for d in (";", ",", "\t")}
    best_delim = max(counts, key=counts.get)

    if counts[best_delim] > 0:
        class DynamicDialect(csv.excel):
            delimiter = best_delim
        return DynamicDialect

    try:
        return csv.Sniffer().sniff(sample, delimiters=[",", ";", "\t"])
    except csv.Error:
        return csv.excel


def _read_csv(file_path: Path, encoding: str = "utf-8-sig") -> list[dict[str, str | None]]:
    """Read a CSV file with BOM handling and column normalization.

    Raises:
        FileNotFoundError: the file does not exist.
        ValueError: the file has no header row.
    """
    with open(file_path, encoding=encoding, newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        reader = csv.DictReader(f, dialect=_sniff_dialect(sample))
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {file_path} has no header row")

        col_map = {col: normalize_column_name(col) for col in reader.fieldnames}
        rows = []
        for raw_row in reader:
            row = {col_map[k]: clean_string(v) for k, v in raw_row.items() if k is not None}
            rows.append(row)

    logger.info("Loaded %d rows from %s (columns: %s)", len(rows), file_path.name, list(col_map.values()))
    return rows


def _first(row: dict[str, str | None], *keys: str) -> str | None:
    for key in keys:
        value = row.get(key)
        if value:
            return value
    return None


def find_csv(data_dir: Path, stems: list[str]) -> Path | None:
    """Find a CSV in *data_dir* whose file stem contains one of *stems*."""
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        return None
    files = sorted(p for p in data_dir.iterdir() if p.suffix.lower() == ".csv")
    for stem in stems:
        for path in files:
            if stem in path.stem.lower():
                return path
    return None


def load_offices(file_path: Path) -> list[Office]:
    """Load the business-units CSV (columns "Офис", "Адрес").

    Rows without an office name are skipped; a repeated name replaces the
    earlier row.
    """
    merged: dict[str, Office] = {}
    for row in _read_csv(file_path):
        name = _first(row, "офис", "название", "name", "office")
        if not name:
            continue
        office = Office(name=name, address=_first(row, "адрес", "address") or "")
        merged[office.key] = office

    offices = list(merged.values())
    logger.info("Parsed %d offices", len(offices))
    return offices


def load_managers(file_path: Path) -> list[Manager]:
    """Load the managers CSV.

    Expected columns (after normalization):
        фио, должность, офис, навыки, количество_обращений_в_работе
    """
    merged: dict[str, Manager] = {}
    for row in _read_csv(file_path):
        name = _first(row, "фио", "имя", "name", "full_name")
        if not name:
            continue
        manager = Manager(
            name=name,
            position=_first(row, "должность", "position") or "",
            office=_first(row, "офис", "филиал", "филиал_офис", "office") or "",
            skills=parse_skills(_first(row, "навыки", "skills")),
            current_load=parse_int(
                _first(row, "количество_обращений_в_работе", "current_load", "load")
            ),
        )
        merged[name.casefold()] = manager

    managers = list(merged.values())
    logger.info("Parsed %d managers", len(managers))
    return managers


def load_tickets(file_path: Path) -> list[Ticket]:
    """Load the tickets CSV.

    Rows without a GUID are skipped. A repeated GUID gets a ``__dup<n>``
    suffix, n counting from 2.
    """
    seen: dict[str, int] = {}
    tickets = []
    for row in _read_csv(file_path):
        guid = _first(row, "guid_клиента", "guid", "client_id", "id")
        if not guid:
            continue

        key = guid.casefold()
        if key in seen:
            seen[key] += 1
            guid = f"{guid}{DUPLICATE_SUFFIX}{seen[key]}"
        else:
            seen[key] = 1

        tickets.append(Ticket(
            guid=guid,
            gender=_first(row, "пол_клиента", "пол", "gender"),
            birth_date=parse_date(_first(row, "дата_рождения", "birth_date")),
            description=_first(row, "описание", "description") or "",
            attachments=_first(row, "вложения", "attachments") or "",
            segment=_first(row, "сегмент_клиента", "сегмент", "segment") or "Mass",
            country=_first(row, "страна", "country"),
            region=_first(row, "область", "регион", "region"),
            city=_first(row, "населённый_пункт", "населенный_пункт", "город", "city", "settlement"),
            street=_first(row, "улица", "street"),
            building=normalize_building(_first(row, "дом", "building", "house")),
        ))

    logger.info("Parsed %d tickets", len(tickets))
    return tickets


def load_dataset(data_dir: Path) -> Dataset:
    """Locate and load the three dataset CSVs from *data_dir*.

    Raises:
        FileNotFoundError: one of the CSVs cannot be found.
    """
    data_dir = Path(data_dir)
    paths = {}
    for kind, stems in (("tickets", TICKET_STEMS), ("managers", MANAGER_STEMS), ("offices", OFFICE_STEMS)):
        path = find_csv(data_dir, stems)
        if path is None:
            raise FileNotFoundError(f"No {kind} CSV found in {data_dir}. Expected something like {stems[0]}.csv")
        paths[kind] = path

    return Dataset(
        tickets=load_tickets(paths["tickets"]),
        managers=load_managers(paths["managers"]),
        offices=load_offices(paths["offices"]),
    )
