from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Subheading:
    text: str


@dataclass(frozen=True)
class DateLine:
    text: str


@dataclass(frozen=True)
class Paragraph:
    text: str


@dataclass(frozen=True)
class ListItem:
    text: str


ContentItem = Union[Subheading, DateLine, Paragraph, ListItem]


@dataclass(frozen=True)
class Section:
    title: str
    items: tuple[ContentItem, ...] = field(default_factory=tuple)
