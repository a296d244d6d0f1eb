"""
Staff Directory

Builds the immutable identifier -> staff record mapping from a list of
{firstName, email} entries and loads it back at startup. The server never
mutates a directory; regenerating one means rerunning the builder.
"""
import importlib
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Optional

from staff_relay.core.exceptions import (
    DirectoryError,
    DuplicateIdentifierError,
    InvalidEmailError,
    InvalidEntryError,
)
from staff_relay.core.identifiers import derive_identifier
from staff_relay.schemas.submission import is_valid_email

logger = logging.getLogger(__name__)

# Accepted spellings of the name key in builder input
NAME_KEYS = ("firstName", "displayName", "name")


@dataclass(frozen=True)
class StaffRecord:
    first_name: str
    email: str

    def to_dict(self) -> Dict[str, str]:
        return {"firstName": self.first_name, "email": self.email}

    def __repr__(self) -> str:
        # Keep addresses out of tracebacks and debug logs
        return f"StaffRecord(first_name={self.first_name!r}, email=<redacted>)"


class StaffDirectory(Mapping):
    """Read-only mapping of identifier to StaffRecord."""

    __slots__ = ("_records",)

    def __init__(self, records: Optional[Mapping] = None):
        self._records = MappingProxyType(dict(records or {}))

    def __getitem__(self, identifier: str) -> StaffRecord:
        return self._records[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"StaffDirectory({len(self)} entries)"

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {identifier: record.to_dict() for identifier, record in sorted(self._records.items())}

    @classmethod
    def from_mapping(cls, raw: Mapping) -> "StaffDirectory":
        """Wrap generated configuration ({id: {firstName, email}})."""
        records = {}
        for identifier, value in raw.items():
            if isinstance(value, StaffRecord):
                records[identifier] = value
                continue
            records[identifier] = StaffRecord(
                first_name=value["firstName"],
                email=value["email"],
            )
        return cls(records)


def _entry_name(entry: Any, index: int) -> str:
    if not isinstance(entry, Mapping):
        raise InvalidEntryError(index, "expected an object")
    for key in NAME_KEYS:
        value = entry.get(key)
        if isinstance(value, str):
            return value
    raise InvalidEntryError(index, "missing firstName")


def build_directory(entries: Iterable[Mapping], secret: str) -> StaffDirectory:
    """
    Derive an identifier per entry and collect the records.

    Args:
        entries: Iterable of {firstName, email} objects
        secret: HMAC key shared with the running server

    Returns:
        StaffDirectory keyed by derived identifier

    Raises:
        InvalidEmailError: an entry's email is not a plausible address
        DuplicateIdentifierError: two entries derive the same identifier
        InvalidEntryError: an entry is not an object or has no name
    """
    records: Dict[str, StaffRecord] = {}
    first_seen: Dict[str, int] = {}

    for index, entry in enumerate(entries):
        first_name = _entry_name(entry, index)
        email = entry.get("email")
        if not isinstance(email, str) or not is_valid_email(email):
            raise InvalidEmailError(index)

        identifier = derive_identifier(first_name, secret)
        if identifier in records:
            raise DuplicateIdentifierError(identifier, first_seen[identifier], index)

        records[identifier] = StaffRecord(first_name=first_name, email=email)
        first_seen[identifier] = index

    return StaffDirectory(records)


def read_entries(path: Path) -> list:
    """Read builder input; the file must hold a JSON array."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise DirectoryError(f"{path.name} must contain a JSON array of staff entries")
    return data


def render_python_module(directory: StaffDirectory) -> str:
    """Source of the generated staff module (STAFF_BY_ID)."""
    lines = [
        '"""',
        "Generated staff directory. Do not edit by hand.",
        "",
        "Regenerate with: python -m staff_relay.scripts.build_directory <staff.json> --output <this file>",
        '"""',
        "from types import MappingProxyType",
        "",
        "STAFF_BY_ID = MappingProxyType({",
    ]
    for identifier, record in directory.to_dict().items():
        lines.append(
            f"    {identifier!r}: MappingProxyType("
            f"{{'firstName': {record['firstName']!r}, 'email': {record['email']!r}}}),"
        )
    lines.append("})")
    return "\n".join(lines) + "\n"


def render_json(directory: StaffDirectory) -> str:
    return json.dumps(directory.to_dict(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def load_directory(app_settings) -> StaffDirectory:
    """
    Load the directory for the running server.

    STAFF_SOURCE_FILE wins when set: a JSON array is built with HASH_SECRET,
    a JSON object is taken as an already generated directory. Otherwise the
    generated module named by STAFF_DIRECTORY_MODULE is imported.
    """
    if app_settings.STAFF_SOURCE_FILE:
        path = Path(app_settings.STAFF_SOURCE_FILE)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, list):
            directory = build_directory(data, app_settings.HASH_SECRET)
        elif isinstance(data, dict):
            directory = StaffDirectory.from_mapping(data)
        else:
            raise DirectoryError(f"{path.name} must contain a JSON array or object")
        logger.info(f"Loaded {len(directory)} staff entries from {path.name}")
        return directory

    module = importlib.import_module(app_settings.STAFF_DIRECTORY_MODULE)
    directory = StaffDirectory.from_mapping(getattr(module, "STAFF_BY_ID", {}))
    if not directory:
        logger.warning(
            f"Staff directory {app_settings.STAFF_DIRECTORY_MODULE} is empty; "
            f"every submission will be rejected"
        )
    else:
        logger.info(f"Loaded {len(directory)} staff entries from {app_settings.STAFF_DIRECTORY_MODULE}")
    return directory
