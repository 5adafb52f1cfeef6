"""Directory listing parser.

Turns the raw text of a Unix-style ``LIST`` response into
ListingEntry objects. Lines that do not have the long-listing shape
(totals, blank lines, other dialects) are skipped.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

# permissions, links, owner, group, size, 12-char date, name
LISTING_PATTERN = re.compile(
    r"^([drwx+-]{10})\s+(\d+)\s+(\w+)\s+(\w+)\s+(\d+)\s+(.{12}) (.*)$",
    re.MULTILINE,
)


class EntryKind(Enum):
    """
    Type of a listed object.

    parse_listing only yields FILE and DIRECTORY: any type character
    other than "d" is reported as FILE. OTHER is left for entries built
    from listing formats that distinguish links or devices.
    """
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class Permissions:
    """Raw rwx triples for owner, group and other."""
    owner: str
    group: str
    other: str


@dataclass(frozen=True)
class ListingEntry:
    """One row of a directory listing."""
    kind: EntryKind
    permissions: Permissions
    owner: str
    group: str
    size: str
    date: str  # opaque, e.g. "Jan  1 00:00"
    name: str

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    @property
    def size_bytes(self) -> int:
        """Size field as an integer."""
        return int(self.size)


def parse_listing(lines: Iterable[str]) -> List[ListingEntry]:
    """
    Parse raw LIST output.

    Args:
        lines: Listing lines as returned by the server

    Returns:
        Entries in the order they appeared, possibly empty
    """
    raw = "\n".join(line.rstrip("\r") for line in lines)
    entries: List[ListingEntry] = []

    for match in LISTING_PATTERN.finditer(raw):
        mode = match.group(1)
        kind = EntryKind.DIRECTORY if mode[0] == "d" else EntryKind.FILE
        bits = mode[1:]

        entries.append(ListingEntry(
            kind=kind,
            permissions=Permissions(owner=bits[0:3], group=bits[3:6], other=bits[6:9]),
            owner=match.group(3),
            group=match.group(4),
            size=match.group(5),
            date=match.group(6),
            name=match.group(7),
        ))

    return entries
