"""Protocol enumerations and source-list formatting shared by the proxy."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum, IntEnum


class McFilter(IntEnum):
    """Multicast filter mode, valued as the kernel's MCAST_INCLUDE/EXCLUDE."""

    INCLUDE_MODE = 1
    EXCLUDE_MODE = 0


class GroupMemProtocol(IntEnum):
    """Group membership protocol versions."""

    IGMPV1 = 0x1
    IGMPV2 = 0x2
    IGMPV3 = 0x4
    MLDV1 = 0x8
    MLDV2 = 0x10


class McastAddrRecordType(IntEnum):
    """Record types of IGMPv3/MLDv2 membership reports."""

    MODE_IS_INCLUDE = 1
    MODE_IS_EXCLUDE = 2
    CHANGE_TO_INCLUDE_MODE = 3
    CHANGE_TO_EXCLUDE_MODE = 4
    ALLOW_NEW_SOURCES = 5
    BLOCK_OLD_SOURCES = 6


def format_source_list(sources: Iterable[object]) -> str:
    """Render sources in sorted order, "; " separated, breaking before every third."""
    pieces = []
    for position, item in enumerate(sorted(sources), start=1):
        if position % 3 == 0:
            pieces.append("\n\t")
        pieces.append(f"{item}; ")
    return "".join(pieces)


__all__ = [
    "McFilter",
    "GroupMemProtocol",
    "McastAddrRecordType",
    "format_source_list",
]

# Enum is re-exported implicitly through the classes above.
_ = Enum