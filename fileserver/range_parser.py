"""Range request header parsing (RFC 7233, single range honored)."""

from typing import Optional

from common.exceptions import MalformedRangeError, RangeNotSatisfiableError
from common.types import ByteRange

RANGE_UNIT_PREFIX = "bytes="
MAX_RANGE_VALUE = 2**63 - 1


def _parse_int(value: str, header: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise MalformedRangeError(f"Invalid range {header!r}")
    number = int(value)
    if number > MAX_RANGE_VALUE:
        raise MalformedRangeError(f"Range value {value} out of range in {header!r}")
    return number


def _parse_unit(unit: str, size: int, header: str) -> Optional[ByteRange]:
    """
    Parse one comma separated range unit.

    Returns:
        ByteRange, or None when the unit starts at or beyond the end of the resource
    """
    if "-" not in unit:
        raise MalformedRangeError(f"Invalid range {header!r}")

    first, last = (part.strip() for part in unit.split("-", 1))

    if not first:
        # suffix form: the last N bytes
        suffix = _parse_int(last, header)
        length = min(suffix, size)
        return ByteRange(start=size - length, length=length)

    start = _parse_int(first, header)
    if start >= size:
        return None

    if not last:
        return ByteRange(start=start, length=size - start)

    end = _parse_int(last, header)
    if start > end:
        raise MalformedRangeError(f"Invalid range {header!r}")
    end = min(end, size - 1)
    return ByteRange(start=start, length=end - start + 1)


def parse_range(header: Optional[str], size: int) -> Optional[ByteRange]:
    """
    Parse a Range header against a resource of the given size.

    Every unit is validated, but only the first one that overlaps the resource
    is returned; multiple ranges are not served as multipart/byteranges.

    Args:
        header: Raw Range header value, or None/empty when absent
        size: Total size of the resource in bytes

    Returns:
        The ByteRange to serve, or None when no Range header was sent

    Raises:
        MalformedRangeError: If the header or any unit is syntactically invalid
        RangeNotSatisfiableError: If no unit overlaps the resource
    """
    if not header:
        return None
    if not header.startswith(RANGE_UNIT_PREFIX):
        raise MalformedRangeError(f"Invalid range {header!r}")

    ranges = []
    no_overlap = False
    for unit in header[len(RANGE_UNIT_PREFIX):].split(","):
        unit = unit.strip()
        if not unit:
            continue
        byte_range = _parse_unit(unit, size, header)
        if byte_range is None:
            no_overlap = True
            continue
        ranges.append(byte_range)

    if not ranges:
        if no_overlap:
            raise RangeNotSatisfiableError(f"Range {header!r} does not overlap {size} bytes")
        # only empty units, treated like an absent header
        return None
    return ranges[0]
