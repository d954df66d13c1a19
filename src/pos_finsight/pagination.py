# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Pagination of printable documents (invoices, BOQs, delivery notes).

A document is a fixed set of sections (header, recipient, totals, footer)
plus an ordered list of line items. Items are split into pages of a fixed
capacity; every page repeats the same sections and only the item slice
changes. Sections that must appear exactly once (a signature or delivery
confirmation block) are attached to the last page only.

The "Page X of Y" footer is only meaningful, and only produced, when a
document spans more than one page.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from math import ceil
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

ITEMS_PER_PAGE = 10


@dataclass(frozen=True)
class LineItem:
    """A printable document line (invoice, BOQ or delivery note row)."""

    description: str
    quantity: float
    rate: float
    amount: float


@dataclass(frozen=True)
class ItemsRange:
    """1-based inclusive positions of a page's items in the full list."""

    start: int
    end: int


@dataclass(frozen=True)
class Page(Generic[T]):
    page_number: int
    total_pages: int
    items: list[T]
    items_range: ItemsRange

    @property
    def is_first_page(self) -> bool:
        return self.page_number == 1

    @property
    def is_last_page(self) -> bool:
        return self.page_number == self.total_pages

    @property
    def show_page_numbers(self) -> bool:
        return self.total_pages > 1

    @property
    def footer_label(self) -> Optional[str]:
        if not self.show_page_numbers:
            return None
        return f"Page {self.page_number} of {self.total_pages}"


def _build_pages(items: Sequence[T], sizes: Sequence[int]) -> list[Page[T]]:
    pages: list[Page[T]] = []
    offset = 0
    total_pages = len(sizes)
    for number, size in enumerate(sizes, start=1):
        chunk = list(items[offset : offset + size])
        start = offset + 1 if chunk else offset
        pages.append(
            Page(
                page_number=number,
                total_pages=total_pages,
                items=chunk,
                items_range=ItemsRange(start=start, end=offset + len(chunk)),
            )
        )
        offset += len(chunk)
    return pages


def paginate(items: Sequence[T], items_per_page: int = ITEMS_PER_PAGE) -> list[Page[T]]:
    """
    Split ``items`` into ``ceil(N / items_per_page)`` pages.

    An empty list still yields one page (with no items), so a document is
    never rendered with zero pages.

    Raises:
        ValueError: if ``items_per_page`` is lower than 1.
    """
    if items_per_page < 1:
        raise ValueError("items_per_page must be at least 1.")

    total_pages = max(1, ceil(len(items) / items_per_page))
    return _build_pages(items, [items_per_page] * total_pages)


# ---------------------------------------------------------------------------
# Whole documents
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Document:
    """
    Content of a printable document.

    ``header``, ``recipient``, ``totals`` and ``footer`` are rendered on
    every page; ``closing_sections`` (signature block, delivery
    confirmation, ...) only on the last one.
    """

    title: str
    items: Sequence[Any]
    header: Mapping[str, Any] = field(default_factory=dict)
    recipient: Mapping[str, Any] = field(default_factory=dict)
    totals: Mapping[str, Any] = field(default_factory=dict)
    footer: Mapping[str, Any] = field(default_factory=dict)
    closing_sections: tuple[str, ...] = ()


@dataclass(frozen=True)
class DocumentPage:
    document: Document
    page: Page[Any]

    @property
    def closing_sections(self) -> tuple[str, ...]:
        return self.document.closing_sections if self.page.is_last_page else ()


def layout_document(
    document: Document, items_per_page: int = ITEMS_PER_PAGE
) -> list[DocumentPage]:
    """Paginate a document's items and attach the shared sections to each page."""
    return [
        DocumentPage(document=document, page=page)
        for page in paginate(document.items, items_per_page)
    ]


# ---------------------------------------------------------------------------
# Delivery notes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeliveryNoteLayout:
    """
    Page capacities for delivery notes.

    The first page loses room to the header and the last page to the
    signature block, so both hold fewer rows than middle pages.
    """

    first_page: int
    middle_page: int
    last_page: int


DELIVERY_NOTE_LAYOUTS: dict[str, DeliveryNoteLayout] = {
    "compact": DeliveryNoteLayout(first_page=11, middle_page=18, last_page=11),
    "standard": DeliveryNoteLayout(first_page=11, middle_page=18, last_page=11),
    "detailed": DeliveryNoteLayout(first_page=13, middle_page=20, last_page=13),
}


def _delivery_note_sizes(count: int, layout: DeliveryNoteLayout) -> list[int]:
    if count <= layout.first_page:
        return [count]

    remaining = count - layout.first_page
    if remaining <= layout.last_page:
        return [layout.first_page, remaining]

    # Fill middle pages, keeping at most `last_page` rows for the last one.
    middle = remaining - layout.last_page
    sizes = [layout.first_page]
    sizes.extend([layout.middle_page] * (middle // layout.middle_page))
    leftover = middle % layout.middle_page
    if leftover:
        sizes.append(leftover)
    sizes.append(layout.last_page)
    return sizes


def paginate_delivery_note(
    items: Sequence[T], template_type: str = "compact"
) -> list[Page[T]]:
    """
    Paginate delivery-note items with reduced first/last page capacity.

    The last page always has room for the signature block. Unknown template
    types fall back to the compact layout.
    """
    layout = DELIVERY_NOTE_LAYOUTS.get(template_type, DELIVERY_NOTE_LAYOUTS["compact"])
    return _build_pages(items, _delivery_note_sizes(len(items), layout))


def delivery_note_page_title(page: Page[Any]) -> str:
    if page.total_pages == 1:
        return "Delivery Note"
    if page.is_last_page:
        return (
            f"Delivery Note - Page {page.page_number} of {page.total_pages} "
            "(Signature Page)"
        )
    return f"Delivery Note - Page {page.page_number} of {page.total_pages}"
