"""Conversion Response Dataclass

Result returned by the conversion server for a successful request.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class PDFResponse:
    """PDF artifact produced by the conversion server.

    Attributes:
        id: Job identifier assigned by the server (X-Job-ID header)
        data: Decompressed PDF bytes
    """

    id: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def write_to(self, path: str) -> None:
        """Write the raw PDF bytes to a file."""
        with open(path, "wb") as f:
            f.write(self.data)
