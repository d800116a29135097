import re
from dataclasses import dataclass

_RANGE_RE = re.compile(r"^\s*(\d+)\s*-\s*(\d*)\s*$")


@dataclass(frozen=True)
class ByteRange:
    """Plage d'octets [start, end], bornes incluses, sur un objet de `total` octets."""
    start: int
    end: int
    total: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total}"


def parse_range_header(header: str, size: int) -> ByteRange:
    """
    Parse un en-tête `Range: bytes=<start>-<end?>`.

    - seule la première plage est prise en compte (pas de multi-range)
    - `end` absent ou au-delà de la fin -> size - 1
    - start >= size ou start > end -> ValueError (jamais de clamp sur start)
    """
    unit, sep, spec = header.partition("=")
    if not sep or unit.strip().lower() != "bytes":
        raise ValueError("Invalid range unit")

    first = spec.split(",", 1)[0]
    match = _RANGE_RE.match(first)
    if not match:
        raise ValueError("Invalid range specification")

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else size - 1

    if start >= size:
        raise ValueError(f"Range start {start} beyond object size {size}")
    if start > end:
        raise ValueError("Range end cannot be less than range start")

    return ByteRange(start=start, end=min(end, size - 1), total=size)
