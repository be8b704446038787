from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple, Union

from ..errors import DocumentFinalizedError
from .palette import RGB


@dataclass(frozen=True)
class TextStyle:
    font: str = "Helvetica"
    size: float = 10.0
    color: RGB = (0, 0, 0)
    align: str = "left"  # left | center | right


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: RGB
    alpha: float = 1.0


@dataclass(frozen=True)
class RoundedRect:
    x: float
    y: float
    width: float
    height: float
    radius: float
    color: RGB
    alpha: float = 1.0


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    color: RGB


@dataclass(frozen=True)
class Text:
    text: str
    x: float
    y: float
    style: TextStyle


@dataclass(frozen=True)
class Image:
    source: Union[str, bytes]
    x: float
    y: float
    width: float
    height: float


DrawCommand = Union[FillRect, RoundedRect, Line, Text, Image]


@dataclass
class Page:
    number: int
    width: float
    height: float
    commands: List[DrawCommand] = field(default_factory=list)

    def texts(self) -> List[Text]:
        return [cmd for cmd in self.commands if isinstance(cmd, Text)]


class Document:
    """Ordered pages of draw commands; read-only once finalized."""

    def __init__(self) -> None:
        self._pages: List[Page] = []
        self._finalized = False

    @property
    def pages(self) -> Tuple[Page, ...]:
        return tuple(self._pages)

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def add_page(self, width: float, height: float) -> Page:
        self._check_open()
        page = Page(number=len(self._pages) + 1, width=width, height=height)
        self._pages.append(page)
        return page

    def issue(self, page: Page, command: DrawCommand) -> None:
        self._check_open()
        page.commands.append(command)

    def finalize(self) -> "Document":
        self._check_open()
        for page in self._pages:
            page.commands = tuple(page.commands)  # type: ignore[assignment]
        self._finalized = True
        return self

    def _check_open(self) -> None:
        if self._finalized:
            raise DocumentFinalizedError("Document is finalized and can no longer be edited")
