# orcamentos/discounts.py
from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Optional

from .config import MAX_DISCOUNT_SALES
from .logging_setup import get_logger
from .utils import nz

import sqlModels.settings_repo as settings_repo
import sqlModels.profiles_repo as profiles_repo

log = get_logger(__name__)

MAX_DISCOUNT_SETTING_KEY = "max_discount_sales"
DEFAULT_MAX_SALES_DISCOUNT = MAX_DISCOUNT_SALES

# =========================
# Papéis
# =========================
ROLE_ADMIN = "admin"
ROLE_MANAGER = "gerente"
ROLE_SALES_EXTERNAL = "vendedor_externo"
ROLE_SALES_INTERNAL = "vendedor_interno"
ROLE_CLIENT = "cliente"

UNRESTRICTED_ROLES = {ROLE_ADMIN, ROLE_MANAGER}
SALES_ROLES = {ROLE_SALES_EXTERNAL, ROLE_SALES_INTERNAL}

# "vendas" foi dividido em externo/interno
_LEGACY_ROLES = {"vendas": ROLE_SALES_EXTERNAL}


def map_role(role: Optional[str]) -> Optional[str]:
    if role is None:
        return None
    r = str(role).strip().lower()
    if not r:
        return None
    return _LEGACY_ROLES.get(r, r)


@dataclass(frozen=True)
class DiscountPolicy:
    """
    Teto de desconto do usuário atual. Calculado uma vez por renderização e
    repassado adiante; nunca guardado entre sessões.
    """
    role: Optional[str]
    can_edit: bool
    max_general: float
    max_individual: float

    @property
    def is_client(self) -> bool:
        return self.role == ROLE_CLIENT

    @property
    def is_sales(self) -> bool:
        return self.role in SALES_ROLES

    def is_valid_general(self, value) -> bool:
        return self._within(value, self.max_general)

    def is_valid_individual(self, value) -> bool:
        return self._within(value, self.max_individual)

    def _within(self, value, maximum: float) -> bool:
        if not self.can_edit:
            return False
        try:
            v = float(value)
        except (TypeError, ValueError):
            return False
        return 0.0 <= v <= maximum

    def error_message(self, kind: str) -> str:
        if self.is_client:
            return "Clientes não têm permissão para aplicar desconto"
        if not self.can_edit:
            return "Usuário sem permissão para alterar descontos"

        maximum = self.max_general if kind == "general" else self.max_individual
        label = "geral" if kind == "general" else "individual"
        if self.is_sales:
            return f"Vendedores podem aplicar no máximo {maximum:g}% de desconto {label}"
        return f"O desconto deve estar entre 0% e {maximum:g}%"

    def validate_general(self, value) -> tuple[bool, str]:
        if self.is_valid_general(value):
            return True, ""
        return False, self.error_message("general")

    def validate_individual(self, value) -> tuple[bool, str]:
        if self.is_valid_individual(value):
            return True, ""
        return False, self.error_message("individual")


# Enquanto o perfil não carregou: ninguém edita desconto
FAIL_CLOSED_POLICY = DiscountPolicy(role=None, can_edit=False, max_general=0.0, max_individual=0.0)


def resolve_policy(role: Optional[str], max_sales_discount: float = DEFAULT_MAX_SALES_DISCOUNT) -> DiscountPolicy:
    r = map_role(role)
    if r in UNRESTRICTED_ROLES:
        return DiscountPolicy(role=r, can_edit=True, max_general=100.0, max_individual=100.0)
    if r in SALES_ROLES:
        mx = min(max(float(nz(max_sales_discount, DEFAULT_MAX_SALES_DISCOUNT)), 0.0), 100.0)
        return DiscountPolicy(role=r, can_edit=True, max_general=mx, max_individual=mx)
    if r == ROLE_CLIENT:
        return DiscountPolicy(role=r, can_edit=False, max_general=0.0, max_individual=0.0)
    # separacao, conferencia, entregador, ... ou desconhecido
    return DiscountPolicy(role=r, can_edit=False, max_general=0.0, max_individual=0.0)


def load_max_sales_discount(con: sqlite3.Connection) -> float:
    """Lê "max_discount_sales" do banco; qualquer falha cai no padrão."""
    try:
        raw = settings_repo.get_setting(con, MAX_DISCOUNT_SETTING_KEY, "")
    except sqlite3.Error:
        log.exception("Erro ao carregar configuração de desconto máximo")
        return DEFAULT_MAX_SALES_DISCOUNT

    if not str(raw).strip():
        log.info("Sem configuração de desconto máximo, usando %s%%", DEFAULT_MAX_SALES_DISCOUNT)
        return DEFAULT_MAX_SALES_DISCOUNT
    try:
        return float(str(raw).strip().replace(",", "."))
    except ValueError:
        log.error("Valor de desconto máximo inválido: %r", raw)
        return DEFAULT_MAX_SALES_DISCOUNT


def policy_for_user(con: sqlite3.Connection, user_id: Optional[str]) -> DiscountPolicy:
    if not user_id:
        return FAIL_CLOSED_POLICY
    try:
        role = profiles_repo.get_role(con, user_id)
    except sqlite3.Error:
        log.exception("Erro ao carregar perfil %s", user_id)
        return FAIL_CLOSED_POLICY
    return resolve_policy(role, load_max_sales_discount(con))
