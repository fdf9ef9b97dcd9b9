import datetime

import pytest

import orcamentos.pdf_layout as pl
from orcamentos.models import Budget, BudgetItem, QuoteContext
from orcamentos.pdf_style import NEUTRAL_GRAY, resolve_style
from orcamentos.pricing import budget_totals


def _doc(**overrides):
    base = {
        "page": {"margins": {"top": 10, "bottom": 10}},
        "footer": {"height": 17},
        "table": {"rowHeight": 20},
    }
    base.update(overrides)
    return pl.PdfDocument(resolve_style(base))


def test_plan_table_pages():
    assert pl.plan_table_pages(47, 12, 12) == [12, 12, 12, 11]
    assert pl.plan_table_pages(5, 3, 12) == [3, 2]
    assert pl.plan_table_pages(5, 0, 12) == [5]
    assert pl.plan_table_pages(0, 12, 12) == []


def test_required_table_pages():
    assert pl.required_table_pages(47, 10, 120) == 4
    assert pl.required_table_pages(12, 10, 120) == 1
    assert pl.required_table_pages(0, 10, 120) == 0


def test_rows_that_fit():
    assert pl.rows_that_fit(30, 270, 20) == 12
    assert pl.rows_that_fit(265, 270, 20) == 0
    with pytest.raises(ValueError):
        pl.rows_that_fit(0, 10, 0)


def test_geometry_page_bottom_excludes_footer():
    doc = _doc()
    g = doc.geom
    assert g.page_bottom == pytest.approx(297 - 10 - 17)
    assert g.usable_height == pytest.approx(297 - 10 - 17 - 10)
    assert g.content_width == pytest.approx(210 - 15 - 15)


def test_ensure_space_breaks_only_when_needed():
    doc = _doc()
    cur = pl.Cursor(0, 200.0)
    assert doc.ensure_space(cur, 50) == cur
    nxt = doc.ensure_space(cur, 80)
    assert nxt == pl.Cursor(1, 10.0)
    assert doc.page_count == 2


def test_block_taller_than_page_starts_at_top_without_looping():
    doc = _doc()
    top = pl.Cursor(0, 10.0)
    assert doc.ensure_space(top, 1000) == top
    assert doc.page_count == 1


def test_table_header_replayed_on_every_page():
    doc = _doc()
    cols = pl.table_columns(doc.geom, doc.style["table"])
    seen = []

    def draw_row(d, cursor, idx):
        seen.append(cursor.page)

    end = pl.emit_table(doc, cols, 47, draw_row, pl.Cursor(0, 10.0), 20.0)

    per_page = [seen.count(p) for p in sorted(set(seen))]
    assert per_page == pl.plan_table_pages(47, 12, 12)
    assert doc.page_count == 4
    assert doc.table_header_pages == [1, 2, 3, 4]
    assert end.page == 3
    assert doc.finish().startswith(b"%PDF")


def test_columns_fill_table_width_and_hidden_columns_take_no_space():
    doc = _doc(table={"showColumns": {"discount": False}})
    cols = pl.table_columns(doc.geom, doc.style["table"])
    keys = [c.key for c in cols]
    assert "discount" not in keys
    assert keys[0] == "item"
    assert sum(c.width for c in cols) == pytest.approx(doc.geom.content_width)
    assert cols[0].x == pytest.approx(doc.geom.content_left)


def test_wrap_never_exceeds_width():
    doc = _doc()
    text = "Parafuso " + "X" * 200 + " sextavado galvanizado"
    lines = doc.wrap(text, 40, 9)
    assert len(lines) > 2
    assert all(doc.text_width(ln, 9) <= 40 for ln in lines)
    assert "".join(lines).replace(" ", "") == text.replace(" ", "")


def _record_text(doc):
    drawn = {}

    def text(x, y, s, *, size, color, **kw):
        drawn[str(s)] = color

    doc.text = text
    return drawn


def test_malformed_header_and_total_colors_fall_back_to_gray():
    doc = _doc(sections={"tableHeaders": {"color": "nope"}, "financialSummary": {"totalColor": "#12"}})
    drawn = _record_text(doc)

    cols = pl.table_columns(doc.geom, doc.style["table"])
    pl.draw_table_header(doc, cols, pl.Cursor(0, 10.0), 8.0)
    assert drawn["TOTAL"] == NEUTRAL_GRAY

    budget = Budget(client_id="c1", items=(BudgetItem("p1", 1, 10.0, 0),))
    ctx = pl.RenderContext(
        quote=QuoteContext(budget=budget),
        totals=budget_totals(budget),
        today=datetime.date(2024, 5, 10),
        budget_number="#O00000001",
    )
    pl.render_financial_summary(doc, ctx, pl.Cursor(0, 40.0))
    assert drawn["TOTAL:"] == NEUTRAL_GRAY


@pytest.mark.parametrize("start_y, expected_rows, expected_header_pages", [
    (230.0, [1, 12, 2], [1, 2, 3]),
    (255.0, [12, 3], [2, 3]),
])
def test_table_starting_low_on_the_page(start_y, expected_rows, expected_header_pages):
    doc = _doc()
    cols = pl.table_columns(doc.geom, doc.style["table"])
    seen = []

    pl.emit_table(doc, cols, 15, lambda d, cursor, idx: seen.append((cursor.page, idx)),
                  pl.Cursor(0, start_y), 20.0)

    pages = [p for p, _ in seen]
    assert [pages.count(p) for p in sorted(set(pages))] == expected_rows
    assert [idx for _, idx in seen] == list(range(15))
    assert doc.table_header_pages == expected_header_pages
