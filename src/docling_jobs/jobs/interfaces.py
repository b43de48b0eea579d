from dataclasses import dataclass
from typing import Optional, Protocol, Union


@dataclass(frozen=True)
class PageRange:
    """Inclusive, 1-based page bounds."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 1:
            raise ValueError("page_range start must be >= 1")
        if self.end < self.start:
            raise ValueError("page_range end must be >= start")

    def as_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)


@dataclass(frozen=True)
class ConversionRequest:
    source: str
    page_range: Optional[PageRange] = None

    def __post_init__(self) -> None:
        if not self.source or not self.source.strip():
            raise ValueError("source must not be empty")


@dataclass(frozen=True)
class Converted:
    text: str


@dataclass(frozen=True)
class ConversionFailed:
    message: str


ConversionOutcome = Union[Converted, ConversionFailed]


class ConverterGateway(Protocol):
    def convert(self, source: str, page_range: Optional[PageRange] = None) -> ConversionOutcome:
        """Convert the document at `source` into Markdown synchronously.
        This is a blocking call; callers should offload to threads if needed.
        Implementations report failure as ConversionFailed instead of raising.
        """
