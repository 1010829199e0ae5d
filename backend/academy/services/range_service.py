"""HTTP byte-range resolution for stored video content.

Only the single-range ``bytes=<start>-<end?>`` form is honoured. Suffix
ranges (``bytes=-500``) and multi-range requests are treated as
unsatisfiable rather than silently falling back to the whole object.
"""
import re
from dataclasses import dataclass

from academy.errors import RangeNotSatisfiable

_RANGE_RE = re.compile(r"bytes=(\d+)-(\d*)", re.IGNORECASE)


@dataclass(frozen=True)
class ByteRange:
    start: int
    end: int
    total: int
    partial: bool

    @property
    def length(self) -> int:
        return self.end - self.start + 1 if self.total else 0

    @property
    def storage_offset(self) -> int:
        # PostgreSQL substring() on bytea is 1-indexed
        return self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total}"

    @property
    def status_code(self) -> int:
        return 206 if self.partial else 200


def parse_range_header(header: str) -> tuple[int, int | None]:
    """Split ``bytes=<start>-<end?>`` into integers. Raises RangeNotSatisfiable."""
    match = _RANGE_RE.fullmatch((header or "").strip())
    if not match:
        raise RangeNotSatisfiable(detail=f"Malformed Range header: {header!r}")
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else None
    return start, end


def resolve_range(header: str | None, total: int) -> ByteRange:
    """Compute the byte window to serve for an object of ``total`` bytes.

    No header means the whole object (status 200). A satisfiable range gives
    ``0 <= start <= end <= total - 1`` with ``end`` clamped to the last byte.
    """
    if header is None:
        return ByteRange(start=0, end=max(total - 1, 0), total=total, partial=False)

    start, end = parse_range_header(header)
    if start >= total:
        raise RangeNotSatisfiable(total=total, detail=f"Range start {start} beyond length {total}")
    real_end = total - 1 if end is None else min(end, total - 1)
    if real_end < start:
        raise RangeNotSatisfiable(total=total, detail=f"Range end {end} before start {start}")
    return ByteRange(start=start, end=real_end, total=total, partial=True)
