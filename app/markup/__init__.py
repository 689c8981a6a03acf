from .builder import ERROR_MARKUP, build_markup
from .models import ContentItem, DateLine, ListItem, Paragraph, Section, Subheading
from .structurer import clean_inline, parse_markup

__all__ = [
    "ERROR_MARKUP",
    "ContentItem",
    "DateLine",
    "ListItem",
    "Paragraph",
    "Section",
    "Subheading",
    "build_markup",
    "clean_inline",
    "parse_markup",
]
