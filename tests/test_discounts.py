import sqlite3

import orcamentos.discounts as disc
import sqlModels.settings_repo as settings_repo


def test_admin_and_manager_unrestricted():
    for role in ("admin", "gerente"):
        p = disc.resolve_policy(role, 10)
        assert p.can_edit
        assert p.max_general == 100.0 and p.max_individual == 100.0
        assert p.is_valid_individual(100)


def test_sales_roles_use_configured_ceiling():
    for role in ("vendedor_externo", "vendedor_interno"):
        p = disc.resolve_policy(role, 15)
        assert p.max_general == 15.0 and p.max_individual == 15.0
        assert p.is_valid_general(15)
        assert not p.is_valid_general(15.01)


def test_legacy_vendas_role_maps_to_external_sales():
    p = disc.resolve_policy("vendas", 12)
    assert p.role == "vendedor_externo"
    assert p.max_individual == 12.0


def test_client_cannot_edit_discounts():
    p = disc.resolve_policy("cliente", 10)
    assert not p.can_edit
    ok, reason = p.validate_individual(5)
    assert not ok
    assert "Clientes" in reason


def test_unknown_or_missing_role_fails_closed():
    assert disc.resolve_policy(None) == disc.FAIL_CLOSED_POLICY
    p = disc.resolve_policy("entregador", 10)
    assert not p.can_edit
    assert not p.is_valid_general(1)


def test_negative_and_non_numeric_are_invalid():
    p = disc.resolve_policy("admin")
    assert not p.is_valid_individual(-1)
    assert not p.is_valid_individual("abc")


def test_sales_error_message_mentions_limit():
    p = disc.resolve_policy("vendedor_externo", 10)
    ok, reason = p.validate_general(20)
    assert not ok
    assert "10%" in reason


def test_load_max_sales_discount_from_store(con):
    settings_repo.set_setting(con, disc.MAX_DISCOUNT_SETTING_KEY, "15")
    assert disc.load_max_sales_discount(con) == 15.0


def test_load_max_sales_discount_missing_or_invalid_uses_default(con):
    assert disc.load_max_sales_discount(con) == disc.DEFAULT_MAX_SALES_DISCOUNT
    settings_repo.set_setting(con, disc.MAX_DISCOUNT_SETTING_KEY, "dez")
    assert disc.load_max_sales_discount(con) == disc.DEFAULT_MAX_SALES_DISCOUNT


def test_load_max_sales_discount_store_failure(monkeypatch, con):
    def boom(*a, **k):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(disc.settings_repo, "get_setting", boom)
    assert disc.load_max_sales_discount(con) == disc.DEFAULT_MAX_SALES_DISCOUNT


def test_policy_for_user(seeded):
    con = seeded["con"]
    settings_repo.set_setting(con, disc.MAX_DISCOUNT_SETTING_KEY, "7,5")
    p = disc.policy_for_user(con, "u1")
    assert p.role == "vendedor_interno"
    assert p.max_individual == 7.5
    assert disc.policy_for_user(con, "adm").max_general == 100.0
    assert disc.policy_for_user(con, None) == disc.FAIL_CLOSED_POLICY
    assert not disc.policy_for_user(con, "nobody").can_edit
