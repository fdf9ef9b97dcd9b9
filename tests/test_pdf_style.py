import copy
import json
import sqlite3

import orcamentos.pdf_style as ps


def test_nested_override_keeps_sibling_defaults():
    cfg = ps.resolve_style({"sections": {"clientInfo": {"padding": {"top": 10}}}})
    pad = cfg["sections"]["clientInfo"]["padding"]
    assert pad["top"] == 10
    assert pad["left"] == ps.DEFAULT_STYLE["sections"]["clientInfo"]["padding"]["left"]
    assert pad["right"] == ps.DEFAULT_STYLE["sections"]["clientInfo"]["padding"]["right"]
    assert cfg["sections"]["paymentInfo"] == ps.DEFAULT_STYLE["sections"]["paymentInfo"]


def test_column_width_override_is_merged():
    cfg = ps.resolve_style({"table": {"columnWidths": {"item": 40}}})
    widths = cfg["table"]["columnWidths"]
    assert widths["item"] == 40
    assert widths["total"] == ps.DEFAULT_STYLE["table"]["columnWidths"]["total"]


def test_deep_merge_does_not_mutate_inputs():
    base = copy.deepcopy(ps.DEFAULT_STYLE)
    override = {"page": {"margins": {"top": 1}}}
    ps.deep_merge(base, override)
    assert base == ps.DEFAULT_STYLE
    assert override == {"page": {"margins": {"top": 1}}}


def test_lists_are_replaced_not_merged():
    cfg = ps.resolve_style({"layout": {"sectionOrder": ["notes", "itemsTable"]}})
    assert cfg["layout"]["sectionOrder"] == ["notes", "itemsTable"]


def test_unknown_sections_are_dropped_from_order():
    cfg = ps.resolve_style({"layout": {"sectionOrder": ["bogus", "notes", "notes"]}})
    assert cfg["layout"]["sectionOrder"] == ["notes"]
    cfg = ps.resolve_style({"layout": {"sectionOrder": ["bogus"]}})
    assert cfg["layout"]["sectionOrder"] == list(ps.SECTION_NAMES)


def test_wrong_types_fall_back_per_field():
    cfg = ps.resolve_style({"page": {"margins": {"top": "abc", "left": 20}}, "header": {"variant": "zigzag"}})
    assert cfg["page"]["margins"]["top"] == ps.DEFAULT_STYLE["page"]["margins"]["top"]
    assert cfg["page"]["margins"]["left"] == 20
    assert cfg["header"]["variant"] == "bar"


def test_json_string_and_invalid_json():
    cfg = ps.resolve_style(json.dumps({"fonts": {"title": 22}}))
    assert cfg["fonts"]["title"] == 22
    assert ps.resolve_style("{not json") == ps.DEFAULT_STYLE
    assert ps.resolve_style("[1, 2]") == ps.DEFAULT_STYLE
    assert ps.resolve_style(None) == ps.DEFAULT_STYLE


def test_save_then_load_from_store(con):
    ps.save_style(con, {"colors": {"primary": "#FF0000"}})
    cfg = ps.load_style(con)
    assert cfg["colors"]["primary"] == "#FF0000"
    assert cfg["colors"]["dark"] == ps.DEFAULT_STYLE["colors"]["dark"]
    ps.reset_style(con)
    assert ps.load_style(con) == ps.DEFAULT_STYLE


def test_load_style_store_failure_returns_defaults(monkeypatch, con):
    def boom(*a, **k):
        raise sqlite3.OperationalError("no such table")

    monkeypatch.setattr(ps.settings_repo, "get_setting", boom)
    assert ps.load_style(con) == ps.DEFAULT_STYLE
    assert ps.load_style(None) == ps.DEFAULT_STYLE


def test_hex_to_rgb():
    assert ps.hex_to_rgb("#0EA5E9") == (14, 165, 233)
    assert ps.hex_to_rgb("fff") == (255, 255, 255)
    assert ps.hex_to_rgb("#GGGGGG") == ps.NEUTRAL_GRAY
    assert ps.hex_to_rgb(None) == (128, 128, 128)
