# orcamentos/pricing.py
"""
Motor de preços do orçamento.

Fonte única de verdade para o formulário de edição, a visualização e o PDF:
nenhum outro módulo recalcula totais por conta própria.

Regras:
  - o total de um item usa SOMENTE o desconto individual do item;
  - o subtotal não tem desconto algum;
  - total geral = itens com desconto + frete (a nota fiscal fica de fora);
  - nada é arredondado aqui: o arredondamento acontece só na formatação.
"""
from __future__ import annotations

from typing import Iterable, NamedTuple

from .models import Budget, BudgetItem
from .utils import nz


def item_subtotal(item: BudgetItem) -> float:
    return item.quantity * item.unit_price


def item_discount_amount(item: BudgetItem) -> float:
    return item_subtotal(item) * (nz(item.discount_percentage) / 100.0)


def item_total(item: BudgetItem) -> float:
    return item.quantity * item.unit_price * (1 - nz(item.discount_percentage) / 100.0)


def subtotal(items: Iterable[BudgetItem]) -> float:
    return sum((item_subtotal(it) for it in items), 0.0)


def total_with_discount(items: Iterable[BudgetItem]) -> float:
    return sum((item_total(it) for it in items), 0.0)


def total_discount_amount(items: Iterable[BudgetItem]) -> float:
    items = list(items)
    return subtotal(items) - total_with_discount(items)


def real_discount_percentage(items: Iterable[BudgetItem]) -> float:
    items = list(items)
    sub = subtotal(items)
    if sub == 0:
        return 0.0
    return (sub - total_with_discount(items)) / sub * 100.0


def grand_total(items: Iterable[BudgetItem], shipping_cost: float = 0.0) -> float:
    return total_with_discount(items) + nz(shipping_cost)


def invoice_value(items: Iterable[BudgetItem], invoice_percentage: float = 0.0) -> float:
    """Valor da nota fiscal: só informativo, nunca somado ao total."""
    return total_with_discount(items) * (nz(invoice_percentage) / 100.0)


class BudgetTotals(NamedTuple):
    subtotal: float
    total_with_discount: float
    total_discount_amount: float
    real_discount_percentage: float
    shipping_cost: float
    grand_total: float
    invoice_percentage: float
    invoice_value: float


def budget_totals(budget: Budget) -> BudgetTotals:
    items = budget.items
    sub = subtotal(items)
    with_disc = total_with_discount(items)
    shipping = nz(budget.shipping_cost)
    return BudgetTotals(
        subtotal=sub,
        total_with_discount=with_disc,
        total_discount_amount=sub - with_disc,
        real_discount_percentage=real_discount_percentage(items),
        shipping_cost=shipping,
        grand_total=with_disc + shipping,
        invoice_percentage=nz(budget.invoice_percentage),
        invoice_value=invoice_value(items, budget.invoice_percentage),
    )
