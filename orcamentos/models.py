# orcamentos/models.py
from __future__ import annotations

import datetime
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional

from .utils import nz


class BudgetStatus(str, Enum):
    PROCESSING = "processing"
    AWAITING_APPROVAL = "awaiting_approval"
    APPROVED = "approved"


STATUS_LABELS = {
    BudgetStatus.PROCESSING: "Processando",
    BudgetStatus.AWAITING_APPROVAL: "Aguardando aprovação",
    BudgetStatus.APPROVED: "Aprovado",
}

# Valores legados (pt-BR) ainda presentes em bases antigas
_STATUS_ALIASES = {
    "PROCESSANDO": BudgetStatus.PROCESSING,
    "PROCESSING": BudgetStatus.PROCESSING,
    "AGUARDANDO_APROVACAO": BudgetStatus.AWAITING_APPROVAL,
    "AWAITING_APPROVAL": BudgetStatus.AWAITING_APPROVAL,
    "APROVADO": BudgetStatus.APPROVED,
    "APPROVED": BudgetStatus.APPROVED,
}


def normalize_status(value) -> Optional[BudgetStatus]:
    if isinstance(value, BudgetStatus):
        return value
    if value is None:
        return None
    u = str(value).strip().upper().replace(" ", "_")
    return _STATUS_ALIASES.get(u)


class Section(str, Enum):
    CLIENT_INFO = "clientInfo"
    ITEMS_TABLE = "itemsTable"
    FINANCIAL_SUMMARY = "financialSummary"
    PAYMENT_INFO = "paymentInfo"
    NOTES = "notes"


SECTION_NAMES = tuple(s.value for s in Section)


@dataclass(frozen=True)
class BudgetItem:
    product_id: str
    quantity: int = 1
    unit_price: float = 0.0
    discount_percentage: float = 0.0
    product_code: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BudgetItem":
        code = row.get("product_code")
        return cls(
            product_id=str(row.get("product_id") or ""),
            quantity=int(nz(row.get("quantity"), 0)),
            unit_price=float(nz(row.get("unit_price"), 0.0)),
            discount_percentage=float(nz(row.get("discount_percentage"), 0.0)),
            product_code=(str(code) if code else None),
        )


@dataclass(frozen=True)
class Budget:
    """
    Orçamento imutável: alterações produzem um novo Budget (dataclasses.replace).

    discount_percentage é o desconto "geral": só serve de valor inicial para
    itens novos. Os totais usam exclusivamente o desconto de cada item.
    invoice_percentage (nota fiscal) é informativo e nunca entra no total.
    """
    client_id: str = ""
    items: tuple[BudgetItem, ...] = ()
    discount_percentage: float = 0.0
    invoice_percentage: float = 0.0
    payment_method_id: str = ""
    payment_type_id: str = ""
    shipping_option_id: str = ""
    shipping_cost: float = 0.0
    local_delivery_info: str = ""
    installments: int = 1
    check_installments: int = 1
    check_due_dates: tuple[int, ...] = ()
    boleto_installments: int = 1
    boleto_due_dates: tuple[int, ...] = ()
    cep_destino: str = ""
    notes: str = ""
    status: BudgetStatus = BudgetStatus.PROCESSING
    created_at: datetime.datetime = field(default_factory=datetime.datetime.now)
    created_by: str = ""
    id: Optional[int] = None

    def with_items(self, items) -> "Budget":
        return replace(self, items=tuple(items))


@dataclass(frozen=True)
class Client:
    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    street: str = ""
    number: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    cep: str = ""

    def address_line(self) -> str:
        parts = []
        if self.street:
            parts.append(self.street)
        if self.number:
            parts.append(f"nº {self.number}")
        if self.neighborhood:
            parts.append(self.neighborhood)
        if self.city and self.state:
            parts.append(f"{self.city}/{self.state}")
        if self.cep:
            parts.append(f"CEP: {self.cep}")
        return " • ".join(parts)


@dataclass(frozen=True)
class Product:
    id: str
    name: str = ""
    internal_code: str = ""
    price: float = 0.0
    stock: float = 0.0


@dataclass(frozen=True)
class QuoteContext:
    """Tudo que o gerador de documento precisa sobre um orçamento."""
    budget: Budget
    client: Optional[Client] = None
    products: Mapping[str, Product] = field(default_factory=dict)
    payment_method_name: str = ""
    payment_type_name: str = ""
    shipping_option_name: str = ""
    seller_name: str = ""

    def product_for(self, item: BudgetItem) -> Optional[Product]:
        return self.products.get(item.product_id)
