"""Hex dump rendering for binary command output, in the layout of Go's ``hex.Dump``."""

from typing import Optional

BYTES_PER_LINE = 16


def _printable(byte: int) -> str:
    return chr(byte) if 32 <= byte <= 126 else "."


def hex_dump(data: bytes, limit: Optional[int] = None) -> str:
    """Render ``data`` as offset, hex columns and a printable column.

    Only the first ``limit`` bytes are rendered when a limit is given.

    >>> print(hex_dump(b"hello"))
    00000000  68 65 6c 6c 6f                                    │hello           │
    """
    if limit is not None:
        data = data[:limit]
    lines = []
    for offset in range(0, len(data), BYTES_PER_LINE):
        chunk = data[offset:offset + BYTES_PER_LINE]
        line = f"{offset:08x}  "
        for i in range(BYTES_PER_LINE):
            line += f"{chunk[i]:02x} " if i < len(chunk) else "   "
            if i in (7, 15):
                line += " "
        text = "".join(_printable(b) for b in chunk).ljust(BYTES_PER_LINE)
        lines.append(f"{line}│{text}│")
    return "\n".join(lines)
