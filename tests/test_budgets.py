import datetime
import sqlite3

import pytest

import orcamentos.budgets as bs
from orcamentos.discounts import resolve_policy, FAIL_CLOSED_POLICY
from orcamentos.models import Budget, BudgetItem, BudgetStatus, Product
from orcamentos.pricing import budget_totals

SALES = resolve_policy("vendedor_externo", 10)
ADMIN = resolve_policy("admin")
PROD = Product(id="p1", name="Parafuso", internal_code="PAR-01", price=20.0)


def _budget(**kw):
    base = dict(client_id="c1", payment_method_id="check", items=(BudgetItem("p1", 2, 20.0, 0),))
    base.update(kw)
    return Budget(**base)


def test_add_item_seeds_price_and_general_discount():
    b = Budget(client_id="c1", discount_percentage=5)
    b2 = bs.add_item(b, SALES, PROD, quantity=3)
    assert b.items == ()
    assert b2.items == (BudgetItem("p1", 3, 20.0, 5.0),)


def test_general_discount_change_does_not_touch_existing_items():
    b = bs.add_item(Budget(client_id="c1"), SALES, PROD)
    b = bs.set_general_discount(b, SALES, 8)
    assert b.items[0].discount_percentage == 0.0
    b = bs.add_item(b, SALES, PROD)
    assert b.items[1].discount_percentage == 8.0


def test_discount_over_policy_is_rejected_not_clamped():
    b = Budget(client_id="c1")
    with pytest.raises(bs.BudgetValidationError, match="10%"):
        bs.add_item(b, SALES, PROD, discount_percentage=15)
    with pytest.raises(bs.BudgetValidationError):
        bs.set_general_discount(b, SALES, 11)
    assert bs.add_item(b, ADMIN, PROD, discount_percentage=15).items[0].discount_percentage == 15.0


def test_fail_closed_policy_only_allows_zero_discount():
    b = bs.add_item(Budget(client_id="c1"), FAIL_CLOSED_POLICY, PROD)
    assert b.items[0].discount_percentage == 0.0
    with pytest.raises(bs.BudgetValidationError):
        bs.update_item(b, FAIL_CLOSED_POLICY, 0, discount_percentage=1)


def test_quantity_must_be_positive():
    with pytest.raises(bs.BudgetValidationError):
        bs.add_item(Budget(client_id="c1"), SALES, PROD, quantity=0)


def test_update_and_remove_item_return_new_budget():
    b = bs.add_item(Budget(client_id="c1"), SALES, PROD)
    b2 = bs.update_item(b, SALES, 0, quantity=4)
    assert b.items[0].quantity == 1
    assert b2.items[0].quantity == 4
    assert bs.remove_item(b2, 0).items == ()
    with pytest.raises(IndexError):
        bs.remove_item(b2, 5)


def test_validate_budget_reasons():
    assert bs.validate_budget(_budget(), SALES) == (True, "")
    assert bs.validate_budget(_budget(client_id=""), SALES) == (False, "Selecione um cliente")
    assert bs.validate_budget(_budget(payment_method_id=""), SALES)[0] is False
    assert bs.validate_budget(_budget(items=()), SALES) == (False, "Adicione ao menos um item")
    ok, reason = bs.validate_budget(_budget(items=(BudgetItem("p1", 1, 10.0, 50),)), SALES)
    assert not ok and reason.startswith("Item 1:")


def test_installment_resize_resets_offsets():
    b = bs.set_check_installments(_budget(), 2)
    b = bs.set_check_due_date(b, 1, 60)
    assert b.check_due_dates == (0, 60)
    b = bs.set_check_installments(b, 3)
    assert b.check_due_dates == (0, 0, 0)
    b = bs.set_boleto_installments(b, 1)
    assert b.boleto_due_dates == (0,)
    with pytest.raises(bs.BudgetValidationError):
        bs.set_boleto_installments(b, 0)


def test_status_moves_forward_one_step():
    b = _budget()
    assert b.status is BudgetStatus.PROCESSING
    b = bs.advance_status(b)
    assert b.status is BudgetStatus.AWAITING_APPROVAL
    b = bs.advance_status(b)
    assert b.status is BudgetStatus.APPROVED
    with pytest.raises(bs.BudgetValidationError):
        bs.advance_status(b)
    assert not bs.can_transition("processing", "approved")
    assert not bs.can_transition("approved", "processing")
    assert bs.can_transition("aguardando_aprovacao", "approved")


def test_save_and_load_roundtrip(con):
    b = _budget(
        items=(BudgetItem("p1", 2, 20.0, 25), BudgetItem("p2", 1, 40.0, 0, product_code="X-9")),
        check_installments=2,
        check_due_dates=(30, 60),
        shipping_cost=15.0,
        created_at=datetime.datetime(2024, 1, 1, 10, 0),
    )
    saved = bs.save_budget(con, b, ADMIN)
    assert saved.id is not None

    loaded = bs.load_budget(con, saved.id)
    assert loaded == saved
    assert budget_totals(loaded).grand_total == 85.0

    updated = bs.save_budget(con, bs.remove_item(loaded, 1), ADMIN)
    assert len(bs.load_budget(con, updated.id).items) == 1


def test_save_rejects_invalid_budget(con):
    with pytest.raises(bs.BudgetValidationError):
        bs.save_budget(con, _budget(client_id=""), ADMIN)


def test_set_status_persists_valid_transition(seeded):
    con, bid = seeded["con"], seeded["budget_id"]
    assert bs.set_status(con, bid, "awaiting_approval") is BudgetStatus.AWAITING_APPROVAL
    with pytest.raises(bs.BudgetValidationError):
        bs.set_status(con, bid, "processing")
    assert bs.load_budget(con, bid).status is BudgetStatus.AWAITING_APPROVAL


def test_load_context_resolves_names(seeded):
    ctx = bs.load_context(seeded["con"], seeded["budget_id"])
    assert ctx.client.name == "José da Silva & Cia."
    assert ctx.payment_method_name == "Cheque"
    assert ctx.shipping_option_name == "Sedex"
    assert ctx.seller_name == "Maria Vendas"
    assert set(ctx.products) == {"p1", "p2"}
    assert ctx.budget.check_due_dates == (30, 60)


def test_load_context_fails_soft_on_lookup_errors(monkeypatch, seeded):
    def boom(*a, **k):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(bs.clients_repo, "get_client", boom)
    monkeypatch.setattr(bs.products_repo, "get_products_by_ids", boom)
    ctx = bs.load_context(seeded["con"], seeded["budget_id"])
    assert ctx.client is None
    assert ctx.products == {}
    assert len(ctx.budget.items) == 2


def test_load_context_missing_budget(con):
    assert bs.load_context(con, 12345) is None


@pytest.mark.parametrize("qty", [1.5, 0.5, float("nan"), "dois"])
def test_fractional_or_invalid_quantity_is_rejected(qty):
    b = bs.add_item(Budget(client_id="c1"), SALES, PROD)
    with pytest.raises(bs.BudgetValidationError, match="inteiro"):
        bs.update_item(b, SALES, 0, quantity=qty)
    with pytest.raises(bs.BudgetValidationError):
        bs.add_item(b, SALES, PROD, quantity=qty)


def test_whole_float_quantity_is_stored_as_int(con):
    b = bs.add_item(_budget(items=()), SALES, PROD)
    b = bs.update_item(b, SALES, 0, quantity=3.0)
    assert b.items[0].quantity == 3
    assert isinstance(b.items[0].quantity, int)

    saved = bs.save_budget(con, b, ADMIN)
    assert budget_totals(bs.load_budget(con, saved.id)).grand_total == budget_totals(b).grand_total == 60.0


def test_save_rejects_fractional_quantity_built_directly(con):
    b = _budget(items=(BudgetItem("p1", 1.5, 20.0, 0),))
    with pytest.raises(bs.BudgetValidationError, match="Item 1"):
        bs.save_budget(con, b, ADMIN)


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), "abc", None])
def test_non_finite_or_non_numeric_discount_is_rejected(value):
    b = bs.add_item(Budget(client_id="c1"), ADMIN, PROD)
    with pytest.raises(bs.BudgetValidationError):
        bs.set_general_discount(b, ADMIN, value)
    with pytest.raises(bs.BudgetValidationError):
        bs.update_item(b, ADMIN, 0, discount_percentage=value)
    with pytest.raises(bs.BudgetValidationError):
        bs.add_item(b, ADMIN, PROD, discount_percentage=value)
    assert bs.validate_budget(_budget(discount_percentage=value), ADMIN)[0] is False


def test_negative_discount_is_rejected():
    with pytest.raises(bs.BudgetValidationError):
        bs.set_general_discount(Budget(client_id="c1"), ADMIN, -5)
