# orcamentos/budgets.py
"""
Serviço do orçamento: o que o formulário de edição faz com um Budget.

Todas as alterações devolvem um Budget novo. Entradas inválidas são
rejeitadas com BudgetValidationError (mensagem pronta para o usuário);
nunca são "corrigidas" em silêncio.
"""
from __future__ import annotations

import datetime
import math
import sqlite3
from dataclasses import replace
from typing import Optional

from .discounts import DiscountPolicy
from .due_dates import resize_offsets, set_offset
from .logging_setup import get_logger
from .models import (
    Budget, BudgetItem, BudgetStatus, Client, Product, QuoteContext, normalize_status,
)
from .utils import nz

import sqlModels.budgets_repo as budgets_repo
import sqlModels.clients_repo as clients_repo
import sqlModels.payments_repo as payments_repo
import sqlModels.products_repo as products_repo
import sqlModels.profiles_repo as profiles_repo
from sqlModels.db import tx

log = get_logger(__name__)


class BudgetValidationError(ValueError):
    pass


# =====================================================
# Validação
# =====================================================

def _number(value) -> Optional[float]:
    """float finito ou None (texto, NaN, infinito)."""
    if isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _validate_discount(value, validator) -> tuple[bool, str]:
    d = _number(value)
    if d is None:
        return False, "Desconto inválido"
    # desconto zero é sempre aceito, mesmo sem permissão de editar
    if d == 0:
        return True, ""
    return validator(d)


def validate_item(item: BudgetItem, policy: DiscountPolicy) -> tuple[bool, str]:
    if not item.product_id:
        return False, "Selecione um produto"
    qty = _number(item.quantity)
    if qty is None or qty != int(qty):
        return False, "A quantidade deve ser um número inteiro"
    if qty < 1:
        return False, "A quantidade deve ser maior que zero"
    price = _number(item.unit_price)
    if price is None:
        return False, "Preço unitário inválido"
    if price < 0:
        return False, "O preço unitário não pode ser negativo"
    return _validate_discount(item.discount_percentage, policy.validate_individual)


def validate_budget(budget: Budget, policy: DiscountPolicy) -> tuple[bool, str]:
    if not budget.client_id:
        return False, "Selecione um cliente"
    if not budget.payment_method_id:
        return False, "Selecione a forma de pagamento"
    if not budget.items:
        return False, "Adicione ao menos um item"
    for n, it in enumerate(budget.items, start=1):
        ok, reason = validate_item(it, policy)
        if not ok:
            return False, f"Item {n}: {reason}"
    ok, reason = _validate_discount(budget.discount_percentage, policy.validate_general)
    if not ok:
        return False, reason
    shipping = _number(budget.shipping_cost)
    if shipping is None or shipping < 0:
        return False, "O valor do frete não pode ser negativo"
    invoice = _number(budget.invoice_percentage)
    if invoice is None or not 0 <= invoice <= 100:
        return False, "O percentual de nota fiscal deve estar entre 0% e 100%"
    return True, ""


def _check(result: tuple[bool, str]) -> None:
    ok, reason = result
    if not ok:
        raise BudgetValidationError(reason)


def _normalized(item: BudgetItem) -> BudgetItem:
    # só depois de validado: quantidade inteira e valores float
    return replace(
        item,
        quantity=int(item.quantity),
        unit_price=float(item.unit_price),
        discount_percentage=float(item.discount_percentage),
    )


# =====================================================
# Itens
# =====================================================

def add_item(
    budget: Budget,
    policy: DiscountPolicy,
    product: Product,
    *,
    quantity: int = 1,
    unit_price: Optional[float] = None,
    discount_percentage: Optional[float] = None,
    product_code: Optional[str] = None,
) -> Budget:
    """
    Item novo: preço do catálogo e o desconto geral do orçamento como valor
    inicial. Depois disso o desconto do item é independente do geral.
    """
    item = BudgetItem(
        product_id=product.id,
        quantity=quantity,
        unit_price=product.price if unit_price is None else unit_price,
        discount_percentage=budget.discount_percentage if discount_percentage is None else discount_percentage,
        product_code=product_code,
    )
    _check(validate_item(item, policy))
    return budget.with_items(budget.items + (_normalized(item),))


def update_item(budget: Budget, policy: DiscountPolicy, index: int, **changes) -> Budget:
    items = list(budget.items)
    if not 0 <= index < len(items):
        raise IndexError(f"Item inexistente: {index + 1}")
    item = replace(items[index], **changes)
    _check(validate_item(item, policy))
    items[index] = _normalized(item)
    return budget.with_items(items)


def remove_item(budget: Budget, index: int) -> Budget:
    items = list(budget.items)
    if not 0 <= index < len(items):
        raise IndexError(f"Item inexistente: {index + 1}")
    del items[index]
    return budget.with_items(items)


def set_general_discount(budget: Budget, policy: DiscountPolicy, value: float) -> Budget:
    # Não mexe nos itens já adicionados
    _check(_validate_discount(value, policy.validate_general))
    return replace(budget, discount_percentage=float(value))


# =====================================================
# Parcelas (cheque / boleto)
# =====================================================

def set_check_installments(budget: Budget, count: int) -> Budget:
    if int(count) < 1:
        raise BudgetValidationError("O número de parcelas deve ser maior que zero")
    return replace(budget, check_installments=int(count), check_due_dates=tuple(resize_offsets(count)))


def set_check_due_date(budget: Budget, index: int, days: int) -> Budget:
    return replace(budget, check_due_dates=tuple(set_offset(budget.check_due_dates, index, days)))


def set_boleto_installments(budget: Budget, count: int) -> Budget:
    if int(count) < 1:
        raise BudgetValidationError("O número de parcelas deve ser maior que zero")
    return replace(budget, boleto_installments=int(count), boleto_due_dates=tuple(resize_offsets(count)))


def set_boleto_due_date(budget: Budget, index: int, days: int) -> Budget:
    return replace(budget, boleto_due_dates=tuple(set_offset(budget.boleto_due_dates, index, days)))


# =====================================================
# Status
# =====================================================

_STATUS_FLOW = (BudgetStatus.PROCESSING, BudgetStatus.AWAITING_APPROVAL, BudgetStatus.APPROVED)


def next_status(status) -> Optional[BudgetStatus]:
    st = normalize_status(status)
    if st is None:
        raise ValueError(f"Status desconhecido: {status!r}")
    i = _STATUS_FLOW.index(st)
    return _STATUS_FLOW[i + 1] if i + 1 < len(_STATUS_FLOW) else None


def can_transition(current, target) -> bool:
    """Só avança, e um passo por vez."""
    tgt = normalize_status(target)
    return tgt is not None and next_status(current) == tgt


def advance_status(budget: Budget) -> Budget:
    nxt = next_status(budget.status)
    if nxt is None:
        raise BudgetValidationError("O orçamento já está aprovado")
    return replace(budget, status=nxt)


# =====================================================
# Persistência
# =====================================================

def _parse_created_at(raw) -> datetime.datetime:
    if isinstance(raw, datetime.datetime):
        return raw
    s = str(raw or "").strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.datetime.fromisoformat(s)
    except ValueError:
        log.warning("created_at inválido (%r); usando agora", raw)
        return datetime.datetime.now()


def budget_from_records(header: dict, items: list[dict]) -> Budget:
    return Budget(
        id=int(header["id"]) if header.get("id") is not None else None,
        client_id=str(header.get("client_id") or ""),
        items=tuple(BudgetItem.from_row(r) for r in items),
        discount_percentage=nz(header.get("discount_percentage")),
        invoice_percentage=nz(header.get("invoice_percentage")),
        payment_method_id=str(header.get("payment_method_id") or ""),
        payment_type_id=str(header.get("payment_type_id") or ""),
        shipping_option_id=str(header.get("shipping_option_id") or ""),
        shipping_cost=nz(header.get("shipping_cost")),
        local_delivery_info=str(header.get("local_delivery_info") or ""),
        installments=int(nz(header.get("installments"), 1)),
        check_installments=int(nz(header.get("check_installments"), 1)),
        check_due_dates=tuple(header.get("check_due_dates") or ()),
        boleto_installments=int(nz(header.get("boleto_installments"), 1)),
        boleto_due_dates=tuple(header.get("boleto_due_dates") or ()),
        cep_destino=str(header.get("cep_destino") or ""),
        notes=str(header.get("notes") or ""),
        status=normalize_status(header.get("status")) or BudgetStatus.PROCESSING,
        created_at=_parse_created_at(header.get("created_at")),
        created_by=str(header.get("created_by") or ""),
    )


def budget_to_records(budget: Budget) -> tuple[dict, list[dict]]:
    header = {c: getattr(budget, c) for c in budgets_repo.HEADER_COLS}
    header["status"] = budget.status.value
    header["created_at"] = budget.created_at.isoformat(timespec="seconds")
    items = [
        {
            "product_id": it.product_id,
            "product_code": it.product_code,
            "quantity": it.quantity,
            "unit_price": it.unit_price,
            "discount_percentage": it.discount_percentage,
        }
        for it in budget.items
    ]
    return header, items


def save_budget(con: sqlite3.Connection, budget: Budget, policy: DiscountPolicy) -> Budget:
    """Valida e grava. Devolve o Budget com id."""
    _check(validate_budget(budget, policy))
    header, items = budget_to_records(budget)
    with tx(con):
        if budget.id is None:
            new_id = budgets_repo.insert_budget(con, header, items)
            log.info("Orçamento %s criado (%d itens)", new_id, len(items))
            return replace(budget, id=new_id)
        budgets_repo.update_budget(con, budget.id, header, items)
    log.info("Orçamento %s atualizado (%d itens)", budget.id, len(items))
    return budget


def set_status(con: sqlite3.Connection, budget_id: int, target) -> BudgetStatus:
    header = budgets_repo.get_budget_header(con, budget_id)
    if header is None:
        raise LookupError(f"Orçamento {budget_id} não encontrado")
    if not can_transition(header.get("status"), target):
        raise BudgetValidationError(
            f"Transição de status inválida: {header.get('status')} -> {target}"
        )
    st = normalize_status(target)
    with tx(con):
        budgets_repo.update_budget_status(con, budget_id, st.value)
    log.info("Orçamento %s: status %s", budget_id, st.value)
    return st


def load_budget(con: sqlite3.Connection, budget_id: int) -> Optional[Budget]:
    """Erros do banco sobem: sem o orçamento não há o que mostrar."""
    header = budgets_repo.get_budget_header(con, budget_id)
    if header is None:
        return None
    return budget_from_records(header, budgets_repo.get_budget_items(con, budget_id))


def _soft(what: str, fn, default):
    try:
        return fn()
    except sqlite3.Error:
        log.exception("Erro ao carregar %s; seguindo sem", what)
        return default


def load_context(con: sqlite3.Connection, budget_id: int) -> Optional[QuoteContext]:
    """
    Orçamento + tudo que o documento referencia. Só a leitura do próprio
    orçamento é obrigatória; cliente, produtos e nomes das opções que
    falharem viram placeholders no documento.
    """
    budget = load_budget(con, budget_id)
    if budget is None:
        return None

    cl_row = _soft("cliente", lambda: clients_repo.get_client(con, budget.client_id), None)
    client = Client(**{k: str(v or "") for k, v in cl_row.items()}) if cl_row else None

    prod_rows = _soft(
        "produtos",
        lambda: products_repo.get_products_by_ids(con, (it.product_id for it in budget.items)),
        {},
    )
    products = {
        pid: Product(
            id=pid,
            name=str(r.get("name") or ""),
            internal_code=str(r.get("internal_code") or ""),
            price=nz(r.get("price")),
            stock=nz(r.get("stock")),
        )
        for pid, r in prod_rows.items()
    }

    return QuoteContext(
        budget=budget,
        client=client,
        products=products,
        payment_method_name=_soft(
            "forma de pagamento", lambda: payments_repo.get_payment_method_name(con, budget.payment_method_id), ""),
        payment_type_name=_soft(
            "tipo de pagamento", lambda: payments_repo.get_payment_type_name(con, budget.payment_type_id), ""),
        shipping_option_name=_soft(
            "opção de frete", lambda: payments_repo.get_shipping_option_name(con, budget.shipping_option_id), ""),
        seller_name=_soft("vendedor", lambda: profiles_repo.get_full_name(con, budget.created_by), ""),
    )
