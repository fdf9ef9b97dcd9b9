# orcamentos/pdf_layout.py
"""
Motor de layout do PDF de orçamento (reportlab).

Sistema de coordenadas: milímetros a partir do canto SUPERIOR esquerdo
(+X = direita, +Y = para baixo). A conversão para o sistema do reportlab
(pontos, origem embaixo) fica em PdfDocument.X / PdfDocument.Y.

Cada seção é uma função render_xxx(doc, ctx, cursor) -> Cursor. O cursor é
um valor imutável (página, y): a seção recebe onde começar e devolve onde a
próxima deve continuar. O único estado mutável é o canvas dentro de
PdfDocument, e ele é usado de forma estritamente sequencial.
"""
from __future__ import annotations

import datetime
import io
import math
from typing import Any, Callable, Mapping, NamedTuple, Optional, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .due_dates import format_due_dates_short
from .logging_setup import get_logger
from .models import QuoteContext, Section
from .pdf_style import hex_to_rgb
from .pricing import BudgetTotals, item_total
from .utils import fmt_date, fmt_money, fmt_percent

log = get_logger(__name__)

PT_TO_MM = 25.4 / 72.0

PRODUCT_NOT_FOUND = "Produto não encontrado"
NOT_AVAILABLE = "N/A"

_FONT_FAMILIES = {
    "helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique"),
    "times": ("Times-Roman", "Times-Bold", "Times-Italic"),
    "courier": ("Courier", "Courier-Bold", "Courier-Oblique"),
}

RGB = tuple[int, int, int]
WHITE: RGB = (255, 255, 255)


# =====================================================
# Valores do layout
# =====================================================

class Cursor(NamedTuple):
    page: int
    y: float

    def down(self, dy: float) -> "Cursor":
        return Cursor(self.page, self.y + dy)


class PageGeometry(NamedTuple):
    width: float
    height: float
    margin_top: float
    margin_right: float
    margin_bottom: float
    margin_left: float
    footer_height: float

    @classmethod
    def from_style(cls, style: Mapping[str, Any], pagesize=A4) -> "PageGeometry":
        m = style["page"]["margins"]
        return cls(
            width=pagesize[0] / mm,
            height=pagesize[1] / mm,
            margin_top=float(m["top"]),
            margin_right=float(m["right"]),
            margin_bottom=float(m["bottom"]),
            margin_left=float(m["left"]),
            footer_height=float(style["footer"]["height"]),
        )

    @property
    def content_left(self) -> float:
        return self.margin_left

    @property
    def content_right(self) -> float:
        return self.width - self.margin_right

    @property
    def content_width(self) -> float:
        return self.content_right - self.content_left

    @property
    def page_bottom(self) -> float:
        """Último y utilizável pelo conteúdo (acima do rodapé)."""
        return self.height - self.margin_bottom - self.footer_height

    @property
    def usable_height(self) -> float:
        return self.page_bottom - self.margin_top


class Palette(NamedTuple):
    primary: RGB
    secondary: RGB
    dark: RGB
    gray: RGB


class RenderContext(NamedTuple):
    quote: QuoteContext
    totals: BudgetTotals
    today: datetime.date
    budget_number: str


class Column(NamedTuple):
    key: str
    title: str
    x: float
    width: float
    align: str  # "left" | "right"


# =====================================================
# Paginação da tabela (funções puras)
# =====================================================

def rows_that_fit(top_y: float, bottom_y: float, row_height: float) -> int:
    if row_height <= 0:
        raise ValueError("row_height deve ser positivo")
    # tolerância para somas em ponto flutuante (ex: 0.1 * 3)
    return max(int(math.floor((bottom_y - top_y) / row_height + 1e-9)), 0)


def plan_table_pages(n_items: int, rows_first_page: int, rows_per_page: int) -> list[int]:
    """
    Quantas linhas caem em cada página. A primeira página pode ter menos
    espaço (cabeçalho do documento, seções anteriores).
    """
    if rows_per_page < 1:
        raise ValueError("rows_per_page deve ser >= 1")
    out: list[int] = []
    left = int(n_items)
    first = max(int(rows_first_page), 0)
    if left <= 0:
        return out
    if first > 0:
        out.append(min(first, left))
        left -= out[-1]
    while left > 0:
        out.append(min(rows_per_page, left))
        left -= out[-1]
    return out


def required_table_pages(n_items: int, row_height: float, usable_height: float) -> int:
    """ceil(N * alturaLinha / alturaÚtil): páginas cheias, sem seções antes."""
    if n_items <= 0:
        return 0
    return int(math.ceil(n_items * row_height / usable_height - 1e-9))


# =====================================================
# Documento (canvas + página atual)
# =====================================================

class PdfDocument:
    def __init__(self, style: Mapping[str, Any], *, title: str = "", logo=None,
                 footer_page_label: bool = True):
        self.style = style
        self.geom = PageGeometry.from_style(style)
        self.logo = logo
        self.footer_page_label = footer_page_label

        self._buf = io.BytesIO()
        self.c = canvas.Canvas(self._buf, pagesize=A4)
        if title:
            self.c.setTitle(title)
        self.W, self.H = A4

        fam = _FONT_FAMILIES.get(style["fonts"].get("family", "helvetica"), _FONT_FAMILIES["helvetica"])
        self.font_reg, self.font_bold, self.font_italic = fam

        self.page_index = 0
        self.table_header_pages: list[int] = []
        self._finished = False

    # ---------- conversão de coordenadas ----------
    def X(self, x_mm: float) -> float:
        return x_mm * mm

    def Y(self, y_mm: float) -> float:
        return self.H - y_mm * mm

    # ---------- paleta ----------
    def palette(self) -> Palette:
        col = self.style["colors"]
        return Palette(
            primary=hex_to_rgb(col.get("primary")),
            secondary=hex_to_rgb(col.get("secondary")),
            dark=hex_to_rgb(col.get("dark")),
            gray=hex_to_rgb(col.get("gray")),
        )

    # ---------- páginas ----------
    @property
    def page_count(self) -> int:
        return self.page_index + 1

    def start_cursor(self) -> Cursor:
        return Cursor(self.page_index, self.geom.margin_top)

    def new_page(self, cursor: Cursor) -> Cursor:
        self._draw_footer()
        self.c.showPage()
        self.page_index += 1
        return Cursor(cursor.page + 1, self.geom.margin_top)

    def ensure_space(self, cursor: Cursor, height: float) -> Cursor:
        """Quebra a página se o bloco não couber. Blocos maiores que a página
        inteira começam no topo de uma página nova e transbordam."""
        if cursor.y + height <= self.geom.page_bottom + 1e-9:
            return cursor
        if cursor.y <= self.geom.margin_top + 1e-9:
            return cursor
        return self.new_page(cursor)

    def finish(self) -> bytes:
        if not self._finished:
            self._draw_footer()
            self.c.save()
            self._finished = True
        return self._buf.getvalue()

    # ---------- primitivas ----------
    def font(self, bold: bool = False, italic: bool = False) -> str:
        if bold:
            return self.font_bold
        if italic:
            return self.font_italic
        return self.font_reg

    def text_width(self, text: str, size: float, bold: bool = False, italic: bool = False) -> float:
        return stringWidth(str(text), self.font(bold, italic), size) * PT_TO_MM

    def text(self, x: float, y: float, text: str, *, size: float, color: RGB,
             bold: bool = False, italic: bool = False, align: str = "left") -> None:
        c = self.c
        c.setFont(self.font(bold, italic), size)
        c.setFillColorRGB(*(v / 255.0 for v in color))
        s = str(text)
        if align == "right":
            c.drawRightString(self.X(x), self.Y(y), s)
        elif align == "center":
            c.drawCentredString(self.X(x), self.Y(y), s)
        else:
            c.drawString(self.X(x), self.Y(y), s)

    def rect(self, x: float, y: float, w: float, h: float, *, fill: Optional[RGB] = None,
             stroke: Optional[RGB] = None, line_width: float = 0.2) -> None:
        c = self.c
        if fill is not None:
            c.setFillColorRGB(*(v / 255.0 for v in fill))
        if stroke is not None:
            c.setStrokeColorRGB(*(v / 255.0 for v in stroke))
            c.setLineWidth(line_width * mm)
        c.rect(self.X(x), self.Y(y + h), w * mm, h * mm,
               stroke=1 if stroke is not None else 0, fill=1 if fill is not None else 0)

    def line(self, x1: float, y1: float, x2: float, y2: float, *, color: RGB, width: float = 0.3) -> None:
        c = self.c
        c.setStrokeColorRGB(*(v / 255.0 for v in color))
        c.setLineWidth(width * mm)
        c.line(self.X(x1), self.Y(y1), self.X(x2), self.Y(y2))

    def image(self, img, x: float, y: float, max_w: float, max_h: float) -> float:
        """Desenha mantendo proporção; devolve a largura usada (mm)."""
        iw, ih = img.getSize()
        if not iw or not ih:
            return 0.0
        scale = min(max_w / iw, max_h / ih)
        w, h = iw * scale, ih * scale
        self.c.drawImage(img, self.X(x), self.Y(y + h), width=w * mm, height=h * mm, mask="auto")
        return w

    # ---------- quebra de texto ----------
    def wrap(self, text: str, max_width: float, size: float, bold: bool = False) -> list[str]:
        """Word wrap; palavras maiores que a linha são cortadas por caractere."""
        out: list[str] = []
        for para in str(text or "").splitlines() or [""]:
            current = ""
            for w in para.split(" "):
                test = (current + " " + w).strip() if current else w
                if self.text_width(test, size, bold) <= max_width:
                    current = test
                    continue
                if current:
                    out.append(current)
                # palavra sozinha maior que a linha
                while w and self.text_width(w, size, bold) > max_width:
                    cut = 1
                    for i in range(1, len(w) + 1):
                        if self.text_width(w[:i], size, bold) <= max_width:
                            cut = i
                        else:
                            break
                    out.append(w[:cut])
                    w = w[cut:]
                current = w
            out.append(current)
        return out

    # ---------- rodapé ----------
    def _draw_footer(self) -> None:
        g = self.geom
        pal = self.palette()
        ft = self.style["footer"]
        fonts = self.style["fonts"]

        top = g.height - g.margin_bottom - g.footer_height + 3
        self.line(g.content_left, top, g.content_right, top, color=pal.primary, width=0.4)

        small = float(fonts["small"])
        y = top + small * PT_TO_MM + 2
        if ft.get("validityText"):
            self.text(g.content_left, y, ft["validityText"], size=small, color=pal.gray)
        y += small * PT_TO_MM + 2.5
        if ft.get("copyrightText"):
            self.text(g.width / 2, y, ft["copyrightText"], size=max(small - 1, 6), color=pal.gray, align="center")
        if self.footer_page_label:
            self.text(g.content_right, y, f"Página {self.page_count}", size=max(small - 1, 6),
                      color=pal.gray, align="right")


# =====================================================
# Helpers de seção
# =====================================================

def line_step(font_size: float, spacing: float) -> float:
    return font_size * PT_TO_MM + spacing


def _card(doc: PdfDocument, cfg: Mapping[str, Any], x: float, y: float, w: float, h: float, accent: RGB) -> None:
    doc.rect(x, y, w, h, fill=hex_to_rgb(cfg.get("backgroundColor")))
    if cfg.get("showBorder", True) and float(cfg.get("borderWidth", 0)) > 0:
        doc.rect(x, y, w, h, stroke=hex_to_rgb(cfg.get("borderColor")),
                 line_width=float(cfg.get("borderWidth", 1)) * 0.25)
    # barra lateral
    doc.rect(x, y, 1.5, h, fill=accent)


class _Field(NamedTuple):
    label: str
    value: str


def _fields_height(doc: PdfDocument, rows: Sequence[Sequence[_Field]], wide: Sequence[_Field],
                   col_w: float, size: float, step: float) -> tuple[float, list[list[str]]]:
    """Altura das linhas em duas colunas + campos largos com quebra."""
    wrapped: list[list[str]] = []
    n_lines = len(rows)
    for f in wide:
        label_w = doc.text_width(f"{f.label}: ", size, bold=True)
        lines = doc.wrap(f.value, col_w * 2 - label_w, size)
        wrapped.append(lines)
        n_lines += len(lines)
    return n_lines * step, wrapped


def _draw_field(doc: PdfDocument, x: float, y: float, f: _Field, size: float, color: RGB) -> float:
    doc.text(x, y, f"{f.label}:", size=size, color=color, bold=True)
    vx = x + doc.text_width(f"{f.label}: ", size, bold=True)
    doc.text(vx, y, f.value, size=size, color=color)
    return vx


def _card_section(doc: PdfDocument, cfg: Mapping[str, Any], cursor: Cursor, title: str,
                  rows: Sequence[Sequence[_Field]], wide: Sequence[_Field] = (),
                  footnote: str = "") -> Cursor:
    """Cartão com título e campos em duas colunas (cliente, pagamento, frete)."""
    g = doc.geom
    pal = doc.palette()
    pad = cfg["padding"]
    tm = cfg["titleMargin"]
    size = float(cfg["fontSize"])
    title_size = float(doc.style["fonts"]["subtitle"]) - 2
    step = line_step(size, float(cfg["lineSpacing"]))

    x = g.content_left
    w = g.content_width
    inner_x = x + 3 + float(pad["left"]) + float(tm["left"])
    inner_w = w - 3 - float(pad["left"]) - float(pad["right"])
    col_w = inner_w / 2

    fields_h, wrapped = _fields_height(doc, rows, wide, col_w, size, step)
    title_h = float(tm["top"]) + title_size * PT_TO_MM + float(tm["bottom"])
    foot_h = step if footnote else 0.0
    height = float(pad["top"]) + title_h + fields_h + foot_h + float(pad["bottom"])

    cursor = doc.ensure_space(cursor, height)
    top = cursor.y
    _card(doc, cfg, x, top, w, height, pal.primary)

    y = top + float(pad["top"]) + float(tm["top"]) + title_size * PT_TO_MM
    doc.text(inner_x, y, title, size=title_size, color=pal.dark, bold=True)
    y += float(tm["bottom"])

    for row in rows:
        y += step
        for i, f in enumerate(row[:2]):
            _draw_field(doc, inner_x + i * col_w, y, f, size, pal.dark)

    for f, lines in zip(wide, wrapped):
        y += step
        vx = _draw_field(doc, inner_x, y, _Field(f.label, lines[0] if lines else ""), size, pal.dark)
        for extra in lines[1:]:
            y += step
            doc.text(vx, y, extra, size=size, color=pal.dark)

    if footnote:
        y += step
        doc.text(inner_x, y, f"* {footnote}", size=size, color=pal.gray, italic=True)

    return Cursor(cursor.page, top + height)


# =====================================================
# Cabeçalho do documento (só na primeira página)
# =====================================================

def render_header(doc: PdfDocument, ctx: RenderContext, cursor: Cursor) -> Cursor:
    g = doc.geom
    pal = doc.palette()
    hdr = doc.style["header"]
    fonts = doc.style["fonts"]
    variant = hdr.get("variant", "bar")
    height = float(hdr.get("height", 25))
    budget = ctx.quote.budget

    title_size = float(fonts["title"])
    normal = float(fonts["normal"])

    if variant == "none":
        y = cursor.y + title_size * PT_TO_MM
        doc.text(g.content_left, y, hdr.get("titleText") or "", size=title_size, color=pal.dark, bold=True)
        doc.text(g.content_right, y, ctx.budget_number, size=normal, color=pal.dark, align="right")
        y += normal * PT_TO_MM + 2
        doc.text(g.content_right, y, fmt_date(budget.created_at), size=normal, color=pal.gray, align="right")
        y += 4
    else:
        if variant == "bar":
            band = hex_to_rgb(hdr.get("backgroundColor"))
            doc.rect(0, 0, g.width, height, fill=band)
            fg = WHITE
        else:  # banner: sem faixa, linha na cor principal
            fg = pal.dark
        band_top = 0.0 if variant == "bar" else cursor.y
        mid = band_top + height / 2

        # logo
        left_x = g.content_left
        logo_w = 0.0
        if hdr.get("showLogo", True) and doc.logo is not None:
            pos = hdr.get("logoPosition", "left")
            max_h = height - 6
            iw, ih = doc.logo.getSize()
            est_w = (iw * max_h / ih) if ih else 0.0
            if pos == "center":
                lx = (g.width - est_w) / 2
            elif pos == "right":
                lx = g.content_right - est_w
            else:
                lx = g.content_left
            logo_w = doc.image(doc.logo, lx, band_top + 3, est_w or max_h, max_h)
            if pos == "left":
                left_x = g.content_left + logo_w + 4

        if hdr.get("showCompanyName", True) and hdr.get("companyName"):
            doc.text(left_x, mid - 1, hdr["companyName"], size=normal + 2, color=fg, bold=True)

        right_x = g.content_right
        if logo_w and hdr.get("logoPosition") == "right":
            right_x -= logo_w + 4
        doc.text(right_x, mid - 1, ctx.budget_number, size=normal, color=fg, align="right")
        doc.text(right_x, mid + normal * PT_TO_MM + 1, fmt_date(budget.created_at),
                 size=normal, color=fg, align="right")

        y = max(band_top + height, cursor.y) + 4

        # logo centralizado: o título vai para baixo da faixa
        if logo_w and hdr.get("logoPosition") == "center":
            y += title_size * PT_TO_MM
            doc.text(g.width / 2, y, hdr.get("titleText") or "", size=title_size, color=pal.dark,
                     bold=True, align="center")
            y += 3
        else:
            doc.text(g.width / 2, mid + title_size * PT_TO_MM / 2, hdr.get("titleText") or "",
                     size=title_size, color=fg, bold=True, align="center")
        if variant == "banner":
            doc.line(g.content_left, y, g.content_right, y, color=pal.primary, width=0.8)
        y += 2

    y += normal * PT_TO_MM + 2
    seller = ctx.quote.seller_name or "Vendedor não identificado"
    doc.text(g.content_left, y, f"Responsável: {seller}", size=normal, color=pal.gray)
    return Cursor(cursor.page, y + 2)


# =====================================================
# Seções
# =====================================================

def render_client_info(doc: PdfDocument, ctx: RenderContext, cursor: Cursor) -> Cursor:
    cfg = doc.style["sections"]["clientInfo"]
    cl = ctx.quote.client

    def v(s: str) -> str:
        return s if s else NOT_AVAILABLE

    if cl is None:
        name = phone = email = address = NOT_AVAILABLE
    else:
        name, phone, email, address = v(cl.name), v(cl.phone), v(cl.email), v(cl.address_line())

    rows = [
        (_Field("Nome", name), _Field("E-mail", email)),
        (_Field("Telefone", phone), _Field("CEP destino", v(ctx.quote.budget.cep_destino))),
    ]
    wide = [_Field("Endereço", address)]
    return _card_section(doc, cfg, cursor, "DADOS DO CLIENTE", rows, wide)


def table_columns(geom: PageGeometry, table_cfg: Mapping[str, Any]) -> list[Column]:
    """
    Larguras calculadas UMA vez como porcentagem da largura da tabela.
    Colunas ocultas não ocupam espaço; o que sobra vai para a descrição.
    """
    show = table_cfg["showColumns"]
    widths = table_cfg["columnWidths"]
    total_w = geom.content_width

    spec = [
        ("quantity", "QTD", "right"),
        ("unitPrice", "VALOR UNIT.", "right"),
        ("discount", "DESC.", "right"),
        ("total", "TOTAL", "right"),
    ]
    visible = [(k, t, a) for k, t, a in spec if show.get(k, True)]
    pct = {k: max(float(widths.get(k, 0)), 0.0) for k, _, _ in visible}
    item_pct = max(float(widths.get("item", 0)), 0.0)
    used = item_pct + sum(pct.values())
    if used <= 0:
        used = 1.0
        item_pct = 1.0
    # normaliza para 100% da largura
    scale = total_w / used

    cols: list[Column] = []
    x = geom.content_left
    item_w = item_pct * scale
    cols.append(Column("item", "PRODUTO/SERVIÇO", x, item_w, "left"))
    x += item_w
    for k, t, a in visible:
        w = pct[k] * scale
        cols.append(Column(k, t, x, w, a))
        x += w
    return cols


def _table_title(doc: PdfDocument, ctx: RenderContext, cursor: Cursor, row_h: float) -> Cursor:
    pal = doc.palette()
    size = float(doc.style["fonts"]["subtitle"])
    title_h = size * PT_TO_MM + 3
    # título + cabeçalho + ao menos uma linha na mesma página
    cursor = doc.ensure_space(cursor, title_h + 2 * row_h)
    doc.text(doc.geom.content_left, cursor.y + size * PT_TO_MM, "ITENS DO ORÇAMENTO",
             size=size, color=pal.dark, bold=True)
    return cursor.down(title_h)


def draw_table_header(doc: PdfDocument, cols: Sequence[Column], cursor: Cursor, row_h: float) -> Cursor:
    """Faixa do cabeçalho: sempre redesenhada inteira, com as mesmas larguras."""
    table = doc.style["table"]
    hcfg = doc.style["sections"]["tableHeaders"]
    size = float(hcfg["fontSize"])
    g = doc.geom

    doc.rect(g.content_left, cursor.y, g.content_width, row_h, fill=hex_to_rgb(table.get("headerBackgroundColor")))
    fg = hex_to_rgb(hcfg.get("color"))
    base = cursor.y + row_h / 2 + size * PT_TO_MM / 2 - 0.3
    for col in cols:
        if col.align == "right":
            doc.text(col.x + col.width - 2, base, col.title, size=size, color=fg, bold=True, align="right")
        else:
            doc.text(col.x + 2, base, col.title, size=size, color=fg, bold=True)

    page_no = cursor.page + 1
    if not doc.table_header_pages or doc.table_header_pages[-1] != page_no:
        doc.table_header_pages.append(page_no)
    return cursor.down(row_h)


RowDrawer = Callable[[PdfDocument, Cursor, int], None]


def emit_table(doc: PdfDocument, cols: Sequence[Column], n_rows: int, draw_row: RowDrawer,
               cursor: Cursor, row_h: float) -> Cursor:
    """
    Cabeçalho + linhas, distribuídas por plan_table_pages. Cada página
    recebe o cabeçalho de novo antes das suas linhas.
    """
    g = doc.geom
    if n_rows <= 0:
        return draw_table_header(doc, cols, cursor, row_h)

    # a faixa do cabeçalho ocupa uma linha em cada página
    first = rows_that_fit(cursor.y + row_h, g.page_bottom, row_h)
    per_page = max(rows_that_fit(g.margin_top + row_h, g.page_bottom, row_h), 1)
    plan = plan_table_pages(n_rows, first, per_page)
    log.debug("Tabela: %d linha(s) em %s (mínimo %d página(s))",
              n_rows, plan, required_table_pages(n_rows, row_h, g.usable_height))

    at_top = cursor.y <= g.margin_top + 1e-9
    idx = 0
    for n, count in enumerate(plan):
        if n > 0 or (first == 0 and not at_top):
            cursor = doc.new_page(cursor)
        cursor = draw_table_header(doc, cols, cursor, row_h)
        for _ in range(count):
            draw_row(doc, cursor, idx)
            cursor = cursor.down(row_h)
            idx += 1
    return cursor


def render_items_table(doc: PdfDocument, ctx: RenderContext, cursor: Cursor) -> Cursor:
    table = doc.style["table"]
    row_h = float(table["rowHeight"])
    g = doc.geom
    pal = doc.palette()
    zebra = hex_to_rgb(table.get("zebraColor"))
    grid = (230, 230, 230)
    size = float(doc.style["fonts"]["small"])
    items = ctx.quote.budget.items

    cols = table_columns(g, table)
    by_key = {c.key: c for c in cols}
    item_col = by_key["item"]

    def _label(idx: int) -> str:
        it = items[idx]
        prod = ctx.quote.product_for(it)
        name = prod.name if prod and prod.name else PRODUCT_NOT_FOUND
        code = it.product_code or (prod.internal_code if prod else "")
        return f"{code} - {name}" if code else name

    def _row(doc: PdfDocument, cur: Cursor, idx: int) -> None:
        it = items[idx]
        if idx % 2 == 0:
            doc.rect(g.content_left, cur.y, g.content_width, row_h, fill=zebra)
        doc.rect(g.content_left, cur.y, g.content_width, row_h, stroke=grid, line_width=0.2)

        lines = doc.wrap(_label(idx), item_col.width - 4, size)[:2]
        step = size * PT_TO_MM + 0.8
        first = cur.y + row_h / 2 - (len(lines) - 1) * step / 2 + size * PT_TO_MM / 2 - 0.3
        for i, ln in enumerate(lines):
            doc.text(item_col.x + 2, first + i * step, ln, size=size, color=pal.dark)

        mid = cur.y + row_h / 2 + size * PT_TO_MM / 2 - 0.3
        values = {
            "quantity": str(it.quantity),
            "unitPrice": fmt_money(it.unit_price),
            "discount": fmt_percent(it.discount_percentage),
            "total": fmt_money(item_total(it)),
        }
        for key, txt in values.items():
            col = by_key.get(key)
            if col is not None:
                doc.text(col.x + col.width - 2, mid, txt, size=size, color=pal.dark, align="right")

    cursor = _table_title(doc, ctx, cursor, row_h)
    if not items:
        cursor = draw_table_header(doc, cols, cursor, row_h)
        doc.text(g.content_left + 2, cursor.y + row_h / 2 + 1, "Nenhum item adicionado.",
                 size=size, color=pal.gray, italic=True)
        return cursor.down(row_h + 2)

    cursor = emit_table(doc, cols, len(items), _row, cursor, row_h)
    return cursor.down(2)


def render_financial_summary(doc: PdfDocument, ctx: RenderContext, cursor: Cursor) -> Cursor:
    cfg = doc.style["sections"]["financialSummary"]
    g = doc.geom
    pal = doc.palette()
    t = ctx.totals

    size = float(cfg["fontSize"])
    label_size = float(cfg["labelFontSize"])
    total_size = float(cfg["totalFontSize"])
    step = line_step(max(size, label_size), float(cfg["lineSpacing"]))

    rows: list[tuple[str, str]] = [("Subtotal:", fmt_money(t.subtotal))]
    if t.total_discount_amount > 0:
        rows.append((f"Descontos ({fmt_percent(round(t.real_discount_percentage, 2))}):",
                     f"-{fmt_money(t.total_discount_amount)}"))
        rows.append(("Total com descontos:", fmt_money(t.total_with_discount)))
    if t.shipping_cost > 0:
        rows.append(("Frete:", fmt_money(t.shipping_cost)))

    title_h = 8.0
    total_h = max(total_size * PT_TO_MM + 5, 9.0)
    height = title_h + 2 + len(rows) * step + 3 + total_h

    cursor = doc.ensure_space(cursor, height)
    top = cursor.y
    x, w = g.content_left, g.content_width
    pad = 4.0

    doc.rect(x, top, w, height, fill=(248, 250, 252), stroke=(230, 230, 230), line_width=0.3)
    doc.rect(x, top, w, title_h, fill=pal.primary)
    doc.text(x + pad, top + title_h / 2 + 1.3, "RESUMO FINANCEIRO", size=size, color=WHITE, bold=True)

    y = top + title_h + 2
    for label, value in rows:
        y += step
        doc.text(x + pad, y, label, size=label_size, color=pal.dark)
        doc.text(x + w - pad, y, value, size=size, color=pal.dark, align="right")

    band_top = top + height - total_h
    doc.rect(x, band_top, w, total_h, fill=pal.primary)
    fg = hex_to_rgb(cfg.get("totalColor"))
    base = band_top + total_h / 2 + total_size * PT_TO_MM / 2 - 0.3
    doc.text(x + pad, base, "TOTAL:", size=total_size, color=fg, bold=True)
    doc.text(x + w - pad, base, fmt_money(t.grand_total), size=total_size, color=fg, bold=True, align="right")

    return Cursor(cursor.page, top + height)


def _is_check(name: str, ident: str) -> bool:
    return "cheque" in (name or "").lower() or (ident or "").lower() == "check"


def _is_boleto(name: str, ident: str) -> bool:
    return "boleto" in (name or "").lower() or (ident or "").lower() == "boleto"


def payment_schedule(ctx: QuoteContext) -> tuple[int, tuple[int, ...]]:
    """(parcelas, prazos em dias) conforme a família do meio de pagamento."""
    b = ctx.budget
    if _is_check(ctx.payment_method_name, b.payment_method_id):
        return b.check_installments, tuple(b.check_due_dates)
    if _is_boleto(ctx.payment_method_name, b.payment_method_id):
        return b.boleto_installments, tuple(b.boleto_due_dates)
    return b.installments, ()


def payment_due_dates_text(ctx: QuoteContext) -> tuple[int, str]:
    installments, offsets = payment_schedule(ctx)
    return installments, format_due_dates_short(ctx.budget.created_at, offsets)


def render_payment_info(doc: PdfDocument, ctx: RenderContext, cursor: Cursor) -> Cursor:
    cfg = doc.style["sections"]["paymentInfo"]
    q = ctx.quote
    b = q.budget

    installments, due_text = payment_due_dates_text(q)
    rows = [
        (_Field("Método", q.payment_method_name or b.payment_method_id or NOT_AVAILABLE),
         _Field("Parcelas", f"{installments}x" if installments and installments > 1 else "À vista")),
        (_Field("Tipo", q.payment_type_name or b.payment_type_id or NOT_AVAILABLE),
         _Field("Desconto geral", fmt_percent(b.discount_percentage))),
    ]
    wide = [_Field("Vencimentos", due_text)] if due_text else []
    cursor = _card_section(doc, cfg, cursor, "CONDIÇÕES DE PAGAMENTO", rows, wide)

    if b.shipping_option_id or b.shipping_cost:
        cursor = cursor.down(float(doc.style["layout"]["sectionSpacing"]) / 2)
        ship_rows = [
            (_Field("Modalidade", q.shipping_option_name or b.shipping_option_id or NOT_AVAILABLE),
             _Field("Valor do frete", fmt_money(b.shipping_cost))),
        ]
        cursor = _card_section(doc, cfg, cursor, "ENTREGA E FRETE", ship_rows,
                               footnote=b.local_delivery_info or "")
    return cursor


def render_notes(doc: PdfDocument, ctx: RenderContext, cursor: Cursor) -> Cursor:
    """
    Observações. Cabem numa página: cartão inteiro (quebra antes se preciso).
    Maiores que uma página: continuam linha a linha nas páginas seguintes.
    """
    notes = (ctx.quote.budget.notes or "").strip()
    if not notes:
        return cursor

    g = doc.geom
    pal = doc.palette()
    size = float(doc.style["fonts"]["normal"])
    title_size = float(doc.style["fonts"]["subtitle"]) - 2
    step = line_step(size, 1.5)
    pad = 4.0
    note_bg = (255, 248, 220)
    accent = (250, 204, 21)

    lines = doc.wrap(notes, g.content_width - 2 * pad - 3, size)
    title_h = title_size * PT_TO_MM + 4

    full_h = 2 * pad + title_h + len(lines) * step
    if full_h <= g.usable_height:
        cursor = doc.ensure_space(cursor, full_h)

    first = True
    remaining = list(lines)
    while remaining:
        head = title_h if first else 0.0
        avail = g.page_bottom - cursor.y - 2 * pad - head
        fit = rows_that_fit(0.0, avail, step)
        if fit < 1:
            if cursor.y <= g.margin_top + 1e-9:
                fit = 1
            else:
                cursor = doc.new_page(cursor)
                continue
        chunk, remaining = remaining[:fit], remaining[fit:]
        h = 2 * pad + head + len(chunk) * step
        doc.rect(g.content_left, cursor.y, g.content_width, h, fill=note_bg, stroke=accent, line_width=0.3)
        doc.rect(g.content_left, cursor.y, 1.5, h, fill=accent)

        y = cursor.y + pad
        if first:
            doc.text(g.content_left + pad + 3, y + title_size * PT_TO_MM, "OBSERVAÇÕES IMPORTANTES",
                     size=title_size, color=pal.dark, bold=True)
            y += title_h
        for ln in chunk:
            y += step
            doc.text(g.content_left + pad + 3, y - 1.5, ln, size=size, color=pal.dark)

        cursor = Cursor(cursor.page, cursor.y + h)
        first = False
        if remaining:
            cursor = doc.new_page(cursor)
    return cursor


def render_invoice_info(doc: PdfDocument, ctx: RenderContext, cursor: Cursor) -> Cursor:
    """Nota fiscal: informativo, fora do total a pagar."""
    t = ctx.totals
    if t.invoice_value <= 0:
        return cursor
    pal = doc.palette()
    fonts = doc.style["fonts"]
    normal = float(fonts["normal"]) + 1
    small = float(fonts["small"])
    height = normal * PT_TO_MM + 2 * (small * PT_TO_MM + 2) + 4

    cursor = doc.ensure_space(cursor, height)
    x = doc.geom.content_left
    y = cursor.y + normal * PT_TO_MM
    doc.text(x, y, "INFORMAÇÕES DA NOTA FISCAL", size=normal, color=pal.dark, bold=True)
    y += small * PT_TO_MM + 2
    doc.text(x, y, f"Percentual de Nota Fiscal: {fmt_percent(t.invoice_percentage)}", size=small, color=pal.dark)
    y += small * PT_TO_MM + 2
    doc.text(x, y, f"Valor da Nota Fiscal: {fmt_money(t.invoice_value)} (não incluso no total)",
             size=small, color=pal.dark)
    return Cursor(cursor.page, cursor.y + height)


SECTION_RENDERERS: dict[str, Callable[[PdfDocument, RenderContext, Cursor], Cursor]] = {
    Section.CLIENT_INFO.value: render_client_info,
    Section.ITEMS_TABLE.value: render_items_table,
    Section.FINANCIAL_SUMMARY.value: render_financial_summary,
    Section.PAYMENT_INFO.value: render_payment_info,
    Section.NOTES.value: render_notes,
}
