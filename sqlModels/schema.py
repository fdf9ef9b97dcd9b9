# sqlModels/schema.py
from __future__ import annotations

SCHEMA_VERSION = 2

DDL = [
    # =========================
    # Meta
    # =========================
    """
    CREATE TABLE IF NOT EXISTS meta (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    )
    """,

    # =========================
    # Configurações do sistema (chave/valor)
    # =========================
    """
    CREATE TABLE IF NOT EXISTS system_configurations (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TEXT NOT NULL DEFAULT (datetime('now'))
    )
    """,

    # =========================
    # Perfis (usuários do sistema)
    # =========================
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        full_name TEXT NOT NULL DEFAULT '',
        email TEXT NOT NULL DEFAULT '',
        role TEXT NOT NULL DEFAULT 'cliente'
    )
    """,

    # =========================
    # Clientes
    # =========================
    """
    CREATE TABLE IF NOT EXISTS clients (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL DEFAULT '',
        phone TEXT NOT NULL DEFAULT '',
        street TEXT NOT NULL DEFAULT '',
        number TEXT NOT NULL DEFAULT '',
        neighborhood TEXT NOT NULL DEFAULT '',
        city TEXT NOT NULL DEFAULT '',
        state TEXT NOT NULL DEFAULT '',
        cep TEXT NOT NULL DEFAULT ''
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_clients_name ON clients(name)",

    # =========================
    # Produtos (catálogo)
    # =========================
    """
    CREATE TABLE IF NOT EXISTS products (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        internal_code TEXT NOT NULL DEFAULT '',
        price REAL NOT NULL DEFAULT 0,
        stock REAL NOT NULL DEFAULT 0,
        updated_at TEXT NOT NULL DEFAULT (datetime('now'))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_products_code ON products(internal_code)",

    # =========================
    # Pagamento / frete
    # =========================
    """
    CREATE TABLE IF NOT EXISTS payment_methods (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS payment_types (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS shipping_options (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        active INTEGER NOT NULL DEFAULT 1
    )
    """,

    # =========================
    # Orçamentos (cabeçalho)
    # =========================
    """
    CREATE TABLE IF NOT EXISTS budgets (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        client_id TEXT NOT NULL,
        notes TEXT NOT NULL DEFAULT '',
        discount_percentage REAL NOT NULL DEFAULT 0,
        invoice_percentage REAL NOT NULL DEFAULT 0,
        payment_method_id TEXT NOT NULL DEFAULT '',
        payment_type_id TEXT NOT NULL DEFAULT '',
        shipping_option_id TEXT NOT NULL DEFAULT '',
        shipping_cost REAL NOT NULL DEFAULT 0,
        local_delivery_info TEXT NOT NULL DEFAULT '',
        installments INTEGER NOT NULL DEFAULT 1,
        check_installments INTEGER NOT NULL DEFAULT 1,
        check_due_dates TEXT NOT NULL DEFAULT '[]',     -- JSON: prazos em dias
        boleto_installments INTEGER NOT NULL DEFAULT 1,
        boleto_due_dates TEXT NOT NULL DEFAULT '[]',    -- JSON: prazos em dias
        cep_destino TEXT NOT NULL DEFAULT '',
        status TEXT NOT NULL DEFAULT 'processing',      -- processing | awaiting_approval | approved
        created_by TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_budgets_created_at ON budgets(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_budgets_client ON budgets(client_id)",
    "CREATE INDEX IF NOT EXISTS idx_budgets_status ON budgets(status)",

    # =========================
    # Itens do orçamento
    # =========================
    """
    CREATE TABLE IF NOT EXISTS budget_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        budget_id INTEGER NOT NULL,
        position INTEGER NOT NULL DEFAULT 0,
        product_id TEXT NOT NULL,
        product_code TEXT,
        quantity INTEGER NOT NULL DEFAULT 1,
        unit_price REAL NOT NULL DEFAULT 0,
        discount_percentage REAL NOT NULL DEFAULT 0,
        FOREIGN KEY(budget_id) REFERENCES budgets(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_budget_items_budget ON budget_items(budget_id, position)",
]
