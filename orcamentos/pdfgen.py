# orcamentos/pdfgen.py
from __future__ import annotations

import datetime
import io
import os
import sqlite3
import urllib.request
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Mapping, NamedTuple, Optional

from reportlab.lib.utils import ImageReader

from .budgets import load_context
from .delivery import log_notify, save_artifact
from .logging_setup import get_logger
from .models import QuoteContext
from .pdf_layout import (
    SECTION_RENDERERS, PdfDocument, RenderContext, render_header, render_invoice_info,
)
from .pdf_style import load_style
from .pricing import budget_totals
from .utils import fmt_budget_number, only_alnum

log = get_logger(__name__)

FALLBACK_CLIENT_NAME = "Cliente"


class RenderedDocument(NamedTuple):
    content: bytes
    filename: str
    pages: int
    table_header_pages: tuple[int, ...]


def build_filename(client_name: Optional[str], today: datetime.date) -> str:
    """Quote_<NomeSemAcentosNemSimbolos>_<AAAA-MM-DD>.pdf"""
    safe = only_alnum(client_name or "") or FALLBACK_CLIENT_NAME
    return f"Quote_{safe}_{today.isoformat()}.pdf"


def render_budget_pdf(
    ctx: QuoteContext,
    style: Mapping[str, Any],
    logo: Optional[ImageReader] = None,
    today: Optional[datetime.date] = None,
) -> RenderedDocument:
    today = today or datetime.date.today()
    totals = budget_totals(ctx.budget)
    number = fmt_budget_number(ctx.budget.id)

    doc = PdfDocument(style, title=f"Orçamento {number}", logo=logo)
    rctx = RenderContext(quote=ctx, totals=totals, today=today, budget_number=number)

    cursor = render_header(doc, rctx, doc.start_cursor())

    layout = style["layout"]
    spacing = float(layout["sectionSpacing"])
    show = layout.get("show", {})
    for name in layout["sectionOrder"]:
        if show.get(name, True) is False:
            continue
        renderer = SECTION_RENDERERS.get(name)
        if renderer is None:
            log.warning("Seção desconhecida ignorada: %s", name)
            continue
        cursor = renderer(doc, rctx, cursor.down(spacing))

    render_invoice_info(doc, rctx, cursor.down(spacing))

    content = doc.finish()
    client_name = ctx.client.name if ctx.client else ""
    log.debug("PDF %s: %d página(s), %d bytes", number, doc.page_count, len(content))
    return RenderedDocument(
        content=content,
        filename=build_filename(client_name, today),
        pages=doc.page_count,
        table_header_pages=tuple(doc.table_header_pages),
    )


# =====================================================
# Logo
# =====================================================

def load_logo_bytes(source: Optional[str], timeout: int = 8) -> Optional[bytes]:
    """Arquivo local ou URL http(s). Falhas -> None (o cabeçalho sai sem logo)."""
    src = str(source or "").strip()
    if not src:
        return None
    try:
        if src.lower().startswith(("http://", "https://")):
            req = urllib.request.Request(src, headers={"User-Agent": "Orcamentos/1.0"})
            with urllib.request.urlopen(req, timeout=timeout) as r:
                return r.read()
        with open(os.path.expanduser(src), "rb") as f:
            return f.read()
    except (OSError, ValueError) as e:
        log.warning("Não foi possível carregar o logo %s (%s)", src, e)
        return None


def logo_reader(data: Optional[bytes]) -> Optional[ImageReader]:
    if not data:
        return None
    try:
        reader = ImageReader(io.BytesIO(data))
        reader.getSize()  # força a leitura: imagem inválida falha aqui, não no meio do PDF
        return reader
    except Exception as e:  # reportlab/PIL levantam tipos variados para imagem inválida
        log.warning("Logo inválido, ignorado (%s)", e)
        return None


# =====================================================
# Exportação
# =====================================================

def export_budget(
    con: sqlite3.Connection,
    budget_id: int,
    *,
    deliver: Callable[[bytes, str], str] = save_artifact,
    notify: Callable[[str, str], None] = log_notify,
    logo_source: Optional[str] = None,
    today: Optional[datetime.date] = None,
) -> Optional[str]:
    """
    Carrega o orçamento, gera o PDF e entrega. Devolve o destino informado
    por deliver, ou None se não foi possível exportar (já notificado).

    Estilo e logo são buscados em paralelo; a conexão precisa aceitar uso
    fora da thread que a criou (sqlModels.db.connect já faz isso).
    """
    try:
        ctx = load_context(con, budget_id)
    except sqlite3.Error:
        log.exception("Falha ao carregar o orçamento %s", budget_id)
        notify("error", "Não foi possível acessar o banco de dados. Verifique a conexão e tente novamente.")
        return None

    if ctx is None:
        notify("error", f"Orçamento {budget_id} não encontrado")
        return None

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="pdf-export") as pool:
        f_style = pool.submit(load_style, con)
        f_logo = pool.submit(load_logo_bytes, logo_source) if logo_source else None
        style = f_style.result()
        logo_data = f_logo.result() if f_logo else None

    if f_logo is None and style["header"].get("showLogo", True):
        logo_data = load_logo_bytes(style["header"].get("logoUrl"))

    doc = render_budget_pdf(ctx, style, logo=logo_reader(logo_data), today=today)

    try:
        dest = deliver(doc.content, doc.filename)
    except OSError as e:
        log.exception("Falha ao salvar %s", doc.filename)
        notify("error", f"Não foi possível salvar o PDF: {e}")
        return None

    notify("success", f"PDF gerado com sucesso: {doc.filename}")
    return dest
