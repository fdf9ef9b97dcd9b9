import pytest

import orcamentos.pricing as pr
from orcamentos.models import Budget, BudgetItem
from orcamentos.utils import fmt_money


def _items():
    return (
        BudgetItem("p1", quantity=2, unit_price=20.0, discount_percentage=25),
        BudgetItem("p2", quantity=1, unit_price=40.0, discount_percentage=0),
    )


def test_totals_for_two_items_with_shipping():
    items = _items()
    assert pr.subtotal(items) == 80.0
    assert pr.total_with_discount(items) == 70.0
    assert pr.total_discount_amount(items) == 10.0
    assert pr.real_discount_percentage(items) == 12.5
    assert pr.grand_total(items, 15.0) == 85.0


def test_item_total_uses_only_item_discount():
    it = BudgetItem("p1", quantity=3, unit_price=10.0, discount_percentage=10)
    assert pr.item_subtotal(it) == 30.0
    assert pr.item_total(it) == pytest.approx(27.0)
    assert pr.item_discount_amount(it) == pytest.approx(3.0)


def test_general_discount_is_not_applied_to_totals():
    b = Budget(client_id="c1", items=(BudgetItem("p1", 2, 50.0, 0),), discount_percentage=30)
    t = pr.budget_totals(b)
    assert t.subtotal == 100.0
    assert t.total_with_discount == 100.0
    assert t.grand_total == 100.0


def test_invoice_is_informational_only():
    b = Budget(client_id="c1", items=_items(), shipping_cost=15.0, invoice_percentage=10)
    t = pr.budget_totals(b)
    assert t.invoice_value == pytest.approx(7.0)
    assert t.grand_total == 85.0


def test_empty_items_give_zero_and_no_division_error():
    assert pr.subtotal([]) == 0.0
    assert pr.real_discount_percentage([]) == 0.0
    assert pr.grand_total([], 12.0) == 12.0


def test_zero_price_items_real_discount_is_zero():
    items = [BudgetItem("p1", quantity=5, unit_price=0.0, discount_percentage=50)]
    assert pr.real_discount_percentage(items) == 0.0


def test_doubling_quantities_doubles_totals():
    items = _items()
    doubled = [BudgetItem(i.product_id, i.quantity * 2, i.unit_price, i.discount_percentage) for i in items]
    assert pr.subtotal(doubled) == 2 * pr.subtotal(items)
    assert pr.total_with_discount(doubled) == 2 * pr.total_with_discount(items)


def test_budget_totals_matches_individual_functions():
    b = Budget(client_id="c1", items=_items(), shipping_cost=15.0)
    t = pr.budget_totals(b)
    assert t == pr.BudgetTotals(
        subtotal=80.0,
        total_with_discount=70.0,
        total_discount_amount=10.0,
        real_discount_percentage=12.5,
        shipping_cost=15.0,
        grand_total=85.0,
        invoice_percentage=0.0,
        invoice_value=0.0,
    )


def test_rounding_only_in_formatting():
    items = [BudgetItem("p1", quantity=3, unit_price=0.335, discount_percentage=0)]
    raw = pr.subtotal(items)
    assert raw != round(raw, 2)
    assert fmt_money(1234.5, "BRL") == "R$ 1.234,50"
    assert fmt_money(-10, "BRL") == "-R$ 10,00"


def test_three_units_plus_discounted_unit_with_shipping():
    b = Budget(
        client_id="c1",
        items=(
            BudgetItem("p1", quantity=3, unit_price=10.0, discount_percentage=0),
            BudgetItem("p2", quantity=1, unit_price=50.0, discount_percentage=20),
        ),
        shipping_cost=15.0,
    )
    t = pr.budget_totals(b)
    assert t.subtotal == 80.0
    assert t.total_with_discount == pytest.approx(70.0)
    assert t.total_discount_amount == pytest.approx(10.0)
    assert t.real_discount_percentage == pytest.approx(12.5)
    assert t.grand_total == pytest.approx(85.0)


def test_same_budget_gives_same_totals():
    b = Budget(client_id="c1", items=_items(), shipping_cost=15.0, invoice_percentage=10)
    assert pr.budget_totals(b) == pr.budget_totals(b)


@pytest.mark.parametrize("discounts, all_zero", [
    ((0, 0, 0), True),
    ((0, 15, 0), False),
    ((5, 10, 100), False),
    ((0.01, 0.01, 0.01), False),
])
def test_discounted_total_never_exceeds_subtotal(discounts, all_zero):
    items = [
        BudgetItem(f"p{n}", quantity=n + 1, unit_price=12.5 * (n + 1), discount_percentage=d)
        for n, d in enumerate(discounts)
    ]
    sub = pr.subtotal(items)
    with_disc = pr.total_with_discount(items)
    assert with_disc <= sub
    assert (with_disc == sub) is all_zero
