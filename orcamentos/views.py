# orcamentos/views.py
"""Visualização somente leitura de um orçamento (texto para terminal)."""
from __future__ import annotations

from .due_dates import format_due_dates
from .models import QuoteContext, STATUS_LABELS
from .pdf_layout import NOT_AVAILABLE, PRODUCT_NOT_FOUND, payment_schedule
from .pricing import budget_totals, item_total
from .utils import fmt_budget_number, fmt_date, fmt_money, fmt_percent


def item_rows(ctx: QuoteContext) -> list[dict]:
    rows = []
    for it in ctx.budget.items:
        prod = ctx.product_for(it)
        rows.append({
            "codigo": it.product_code or (prod.internal_code if prod else ""),
            "produto": prod.name if prod and prod.name else PRODUCT_NOT_FOUND,
            "quantidade": it.quantity,
            "preco": it.unit_price,
            "desconto": it.discount_percentage,
            "total": item_total(it),
        })
    return rows


def render_text(ctx: QuoteContext) -> str:
    b = ctx.budget
    t = budget_totals(b)
    out: list[str] = []

    out.append(f"Orçamento {fmt_budget_number(b.id)} - {STATUS_LABELS.get(b.status, str(b.status))}")
    out.append(f"Data: {fmt_date(b.created_at)}")
    out.append(f"Cliente: {ctx.client.name if ctx.client and ctx.client.name else NOT_AVAILABLE}")
    if ctx.seller_name:
        out.append(f"Responsável: {ctx.seller_name}")
    out.append("")

    for n, r in enumerate(item_rows(ctx), start=1):
        label = f"{r['codigo']} - {r['produto']}" if r["codigo"] else r["produto"]
        out.append(
            f"{n:>3}. {label} | {r['quantidade']} x {fmt_money(r['preco'])}"
            f" | desc. {fmt_percent(r['desconto'])} | {fmt_money(r['total'])}"
        )
    if not b.items:
        out.append("  (sem itens)")
    out.append("")

    out.append(f"Subtotal: {fmt_money(t.subtotal)}")
    if t.total_discount_amount > 0:
        out.append(
            f"Descontos: -{fmt_money(t.total_discount_amount)}"
            f" ({fmt_percent(round(t.real_discount_percentage, 2))})"
        )
    if t.shipping_cost > 0:
        out.append(f"Frete: {fmt_money(t.shipping_cost)}")
    out.append(f"TOTAL: {fmt_money(t.grand_total)}")
    if t.invoice_value > 0:
        out.append(
            f"Nota fiscal ({fmt_percent(t.invoice_percentage)}): {fmt_money(t.invoice_value)} (não incluso no total)"
        )

    out.append("")
    out.append(f"Pagamento: {ctx.payment_method_name or b.payment_method_id or NOT_AVAILABLE}")
    # mesma escolha de parcelas e prazos do PDF
    installments, offsets = payment_schedule(ctx)
    if installments > 1:
        out.append(f"Parcelas: {installments}x")
    due_text = format_due_dates(b.created_at, offsets)
    if due_text:
        out.append(f"Vencimentos: {due_text}")
    if ctx.shipping_option_name or b.shipping_option_id:
        out.append(f"Entrega: {ctx.shipping_option_name or b.shipping_option_id}")
    if b.notes:
        out.append(f"Observações: {b.notes}")
    return "\n".join(out)
