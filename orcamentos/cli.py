# orcamentos/cli.py
from __future__ import annotations

import argparse
import json
import sys

from .budgets import load_context
from .dataio import read_products_sheet
from .db_path import resolve_db_path
from .delivery import log_notify, save_artifact
from .logging_setup import get_logger, init_logging
from .pdf_style import load_style, reset_style, save_style
from .pdfgen import export_budget
from .views import render_text

import sqlModels.products_repo as products_repo
from sqlModels.db import connect, ensure_schema, tx

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="orcamentos", description="Orçamentos: visualização e exportação em PDF")
    ap.add_argument("--db", default="", help="caminho do banco sqlite (padrão: Documentos/Orcamentos/data)")
    ap.add_argument("--log-level", default="", choices=["", "ERROR", "WARNING", "INFO", "DEBUG"])
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="cria/migra o banco")

    p = sub.add_parser("show", help="mostra um orçamento")
    p.add_argument("budget_id", type=int)

    p = sub.add_parser("export", help="gera o PDF de um orçamento")
    p.add_argument("budget_id", type=int)
    p.add_argument("--out", default="", help="pasta de saída")
    p.add_argument("--logo", default="", help="arquivo ou URL do logo (padrão: header.logoUrl)")

    p = sub.add_parser("style", help="configuração visual do PDF")
    p.add_argument("action", choices=["show", "set", "reset"])
    p.add_argument("json", nargs="?", default="", help="JSON parcial (para 'set')")

    p = sub.add_parser("import-products", help="importa produtos de uma planilha")
    p.add_argument("path")
    p.add_argument("--sheet", default="0")
    p.add_argument("--header", type=int, default=0)
    return ap


def _cmd_show(con, args) -> int:
    ctx = load_context(con, args.budget_id)
    if ctx is None:
        print(f"Orçamento {args.budget_id} não encontrado", file=sys.stderr)
        return 1
    print(render_text(ctx))
    return 0


def _cmd_export(con, args) -> int:
    def deliver(content: bytes, filename: str) -> str:
        return save_artifact(content, filename, args.out or None)

    dest = export_budget(con, args.budget_id, deliver=deliver, notify=log_notify, logo_source=args.logo or None)
    if dest is None:
        return 1
    print(dest)
    return 0


def _cmd_style(con, args) -> int:
    if args.action == "show":
        print(json.dumps(load_style(con), ensure_ascii=False, indent=2))
        return 0
    if args.action == "reset":
        with tx(con):
            reset_style(con)
        print("Configuração do PDF restaurada para o padrão")
        return 0

    try:
        partial = json.loads(args.json or "")
    except ValueError as e:
        print(f"JSON inválido: {e}", file=sys.stderr)
        return 2
    try:
        with tx(con):
            save_style(con, partial)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    print("Configuração do PDF salva")
    return 0


def _cmd_import(con, args) -> int:
    sheet = int(args.sheet) if str(args.sheet).isdigit() else args.sheet
    try:
        df = read_products_sheet(args.path, sheet_name=sheet, header=args.header)
    except (FileNotFoundError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 1
    with tx(con):
        n = products_repo.upsert_products(con, df)
    print(f"{n} produto(s) importado(s)")
    return 0


_COMMANDS = {
    "show": _cmd_show,
    "export": _cmd_export,
    "style": _cmd_style,
    "import-products": _cmd_import,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        init_logging(level=args.log_level)

    db_file = args.db or resolve_db_path()
    con = connect(db_file)
    try:
        ensure_schema(con)
        if args.command == "init-db":
            print(db_file)
            return 0
        return _COMMANDS[args.command](con, args)
    finally:
        con.close()
