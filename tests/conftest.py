import os, shutil, datetime, tempfile
import pytest

# Antes de qualquer import de orcamentos.*: logs fora de ~/Documents
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "orcamentos-tests-logs"))
os.environ.setdefault("LOG_LEVEL", "DEBUG")


@pytest.fixture(autouse=True, scope="session")
def _init_logging_for_tests(tmp_path_factory):
    # Cada execução dos testes grava logs num diretório temporário
    log_dir = tmp_path_factory.mktemp("logs")
    os.environ["LOG_DIR"] = str(log_dir)
    os.environ["LOG_LEVEL"] = "DEBUG"

    from orcamentos.logging_setup import init_logging
    init_logging(level="DEBUG", log_dir=str(log_dir))

    yield
    shutil.rmtree(log_dir, ignore_errors=True)


@pytest.fixture
def con(tmp_path):
    from sqlModels.db import connect, ensure_schema
    c = connect(str(tmp_path / "test.sqlite3"))
    ensure_schema(c)
    yield c
    c.close()


@pytest.fixture
def seeded(con):
    """Cliente, produtos, opções de pagamento/frete, vendedor e um orçamento salvo."""
    import sqlModels.clients_repo as clients_repo
    import sqlModels.payments_repo as payments_repo
    import sqlModels.profiles_repo as profiles_repo
    import sqlModels.budgets_repo as budgets_repo
    from sqlModels.db import tx

    with tx(con):
        clients_repo.upsert_client(
            con, id="c1", name="José da Silva & Cia.", email="jose@example.com", phone="(11) 99999-0000",
            street="Rua das Flores", number="100", neighborhood="Centro", city="São Paulo",
            state="SP", cep="01000-000",
        )
        con.executemany(
            "INSERT INTO products(id, name, internal_code, price, stock) VALUES(?,?,?,?,?)",
            [("p1", "Parafuso sextavado", "PAR-01", 20.0, 100), ("p2", "Porca M8", "POR-08", 40.0, 50)],
        )
        payments_repo.upsert_option(con, "payment_methods", "check", "Cheque")
        payments_repo.upsert_option(con, "payment_types", "prazo", "A prazo")
        payments_repo.upsert_option(con, "shipping_options", "sedex", "Sedex")
        profiles_repo.upsert_profile(con, id="u1", full_name="Maria Vendas", role="vendedor_interno")
        profiles_repo.upsert_profile(con, id="adm", full_name="Ana Admin", role="admin")

        budget_id = budgets_repo.insert_budget(
            con,
            {
                "client_id": "c1",
                "notes": "Entrega no período da manhã.",
                "discount_percentage": 5,
                "invoice_percentage": 10,
                "payment_method_id": "check",
                "payment_type_id": "prazo",
                "shipping_option_id": "sedex",
                "shipping_cost": 15,
                "installments": 2,
                "check_installments": 2,
                "check_due_dates": [30, 60],
                "cep_destino": "01000-000",
                "status": "processing",
                "created_by": "u1",
                "created_at": "2024-01-01T10:00:00",
            },
            [
                {"product_id": "p1", "quantity": 2, "unit_price": 20.0, "discount_percentage": 25},
                {"product_id": "p2", "quantity": 1, "unit_price": 40.0, "discount_percentage": 0},
            ],
        )
    return {"con": con, "budget_id": budget_id, "today": datetime.date(2024, 5, 10)}
