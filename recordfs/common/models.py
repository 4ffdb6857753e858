"""Pydantic models for recordfs."""

from pydantic import BaseModel, Field


class RecordFileInfo(BaseModel):
    """Summary of a fixed-record file."""

    path: str = Field(..., description="File path")
    exists: bool = Field(..., description="Whether the file exists")
    size: int = Field(0, description="File size in bytes")
    record_size: int = Field(..., description="Expected record size in bytes")

    @property
    def record_count(self) -> int:
        """Number of complete records in the file."""
        return self.size // self.record_size

    @property
    def remainder(self) -> int:
        """Trailing bytes that do not form a complete record."""
        return self.size % self.record_size

    @property
    def aligned(self) -> bool:
        """Check if the file length is a multiple of the record size."""
        return self.remainder == 0
