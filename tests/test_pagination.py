import pytest

from pos_finsight.pagination import (
    DELIVERY_NOTE_LAYOUTS,
    Document,
    ItemsRange,
    LineItem,
    delivery_note_page_title,
    layout_document,
    paginate,
    paginate_delivery_note,
)


def _line_items(count: int) -> list[LineItem]:
    return [
        LineItem(description=f"Item {i}", quantity=1, rate=2.5, amount=2.5)
        for i in range(1, count + 1)
    ]


def test_paginate_23_items_in_pages_of_10() -> None:
    pages = paginate(_line_items(23), items_per_page=10)

    assert [len(p.items) for p in pages] == [10, 10, 3]
    assert [p.items_range for p in pages] == [
        ItemsRange(1, 10),
        ItemsRange(11, 20),
        ItemsRange(21, 23),
    ]
    assert [p.is_last_page for p in pages] == [False, False, True]
    assert pages[0].is_first_page
    assert all(p.total_pages == 3 for p in pages)


def test_paginate_preserves_every_item_in_order() -> None:
    items = list(range(47))

    pages = paginate(items, items_per_page=6)

    assert [x for p in pages for x in p.items] == items
    assert len(pages) == 8


def test_paginate_empty_list_yields_one_empty_page() -> None:
    pages = paginate([], items_per_page=10)

    assert len(pages) == 1
    assert pages[0].items == []
    assert pages[0].items_range == ItemsRange(0, 0)
    assert pages[0].is_first_page and pages[0].is_last_page
    assert pages[0].footer_label is None


def test_paginate_exact_multiple() -> None:
    pages = paginate(_line_items(20), items_per_page=10)

    assert len(pages) == 2
    assert pages[-1].items_range == ItemsRange(11, 20)


def test_paginate_rejects_invalid_capacity() -> None:
    with pytest.raises(ValueError):
        paginate(_line_items(3), items_per_page=0)


def test_footer_label_only_on_multi_page_documents() -> None:
    single = paginate(_line_items(3))
    multi = paginate(_line_items(12))

    assert single[0].show_page_numbers is False
    assert [p.footer_label for p in multi] == ["Page 1 of 2", "Page 2 of 2"]


def test_layout_document_closing_sections_on_last_page_only() -> None:
    document = Document(
        title="Invoice",
        items=_line_items(23),
        header={"Invoice #": "INV-001"},
        totals={"Total": 57.5},
        closing_sections=("Authorized signature",),
    )

    pages = layout_document(document, items_per_page=10)

    assert len(pages) == 3
    assert [p.closing_sections for p in pages] == [
        (),
        (),
        ("Authorized signature",),
    ]
    # Header repeated on every page
    assert all(p.document.header == {"Invoice #": "INV-001"} for p in pages)


@pytest.mark.parametrize(
    "count, expected",
    [
        (0, [0]),
        (5, [5]),
        (11, [11]),
        (20, [11, 9]),
        (22, [11, 11]),
        (30, [11, 8, 11]),
        (40, [11, 18, 11]),
        (60, [11, 18, 18, 2, 11]),
    ],
)
def test_delivery_note_page_sizes(count, expected) -> None:
    pages = paginate_delivery_note(list(range(count)), "compact")

    assert [len(p.items) for p in pages] == expected
    assert sum(len(p.items) for p in pages) == count


def test_delivery_note_detailed_template_and_fallback() -> None:
    detailed = paginate_delivery_note(list(range(30)), "detailed")
    unknown = paginate_delivery_note(list(range(30)), "fancy")

    assert [len(p.items) for p in detailed] == [13, 4, 13]
    assert [len(p.items) for p in unknown] == [11, 8, 11]
    assert DELIVERY_NOTE_LAYOUTS["standard"] == DELIVERY_NOTE_LAYOUTS["compact"]


def test_delivery_note_page_titles() -> None:
    single = paginate_delivery_note(list(range(3)))
    multi = paginate_delivery_note(list(range(30)))

    assert delivery_note_page_title(single[0]) == "Delivery Note"
    assert delivery_note_page_title(multi[0]) == "Delivery Note - Page 1 of 3"
    assert (
        delivery_note_page_title(multi[-1])
        == "Delivery Note - Page 3 of 3 (Signature Page)"
    )
