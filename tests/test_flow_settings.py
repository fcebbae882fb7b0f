import json
from pathlib import Path

from categorization import category_color, classify_category
from flow_settings import category_config_from_settings, load_flow_settings, save_flow_settings


def test_flow_settings_roundtrip(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "flow_settings.json"
    save_flow_settings(
        str(target),
        {
            "keyword_map": {"Pets": ["groom", "vet"]},
            "income_keywords": ["stipend"],
            "colors": {"budget": "#000000"},
            "max_income_categories": 3,
            "max_expense_categories": 7,
            "include_categories": ["Income", "Pets"],
            "device": "mobile",
        },
    )

    loaded = load_flow_settings(str(target))
    assert loaded["keyword_map"] == {"Pets": ["groom", "vet"]}
    assert loaded["income_keywords"] == ["stipend"]
    assert loaded["colors"] == {"budget": "#000000"}
    assert loaded["max_income_categories"] == 3
    assert loaded["max_expense_categories"] == 7
    assert loaded["include_categories"] == ["Income", "Pets"]
    assert loaded["device"] == "mobile"


def test_flow_settings_missing_file_returns_defaults(tmp_path: Path) -> None:
    loaded = load_flow_settings(str(tmp_path / "missing.json"))

    assert loaded["keyword_map"] == {}
    assert loaded["max_income_categories"] == 5
    assert loaded["max_expense_categories"] == 5
    assert loaded["include_categories"] is None
    assert loaded["device"] == "desktop"


def test_flow_settings_drop_malformed_entries(tmp_path: Path) -> None:
    target = tmp_path / "flow_settings.json"
    target.write_text(
        json.dumps(
            {
                "keyword_map": {"Pets": "groom", "Travel": ["", "ferry"]},
                "max_income_categories": -2,
                "max_expense_categories": "many",
                "device": "tablet",
            }
        ),
        encoding="utf-8",
    )

    loaded = load_flow_settings(str(target))
    assert loaded["keyword_map"] == {"Travel": ["ferry"]}
    assert loaded["max_income_categories"] == 5
    assert loaded["max_expense_categories"] == 5
    assert loaded["device"] == "desktop"


def test_category_config_from_settings_overrides_tables() -> None:
    config = category_config_from_settings(
        {"keyword_map": {"Pets": ["groom"]}, "income_keywords": ["stipend"], "colors": {"budget": "#000000"}}
    )

    assert classify_category("Dog Grooming", False, config) == "Pets"
    assert classify_category("Research stipend", True, config) == "Income"
    assert category_color("Budget", config) == "#000000"
