import json

import pytest

from sylva.vocab import DEFAULT_VOCABULARIES, load_vocabularies


def test_missing_file_returns_builtins(tmp_path):
    assert load_vocabularies(str(tmp_path)) is DEFAULT_VOCABULARIES


def test_unreadable_file_returns_builtins(tmp_path):
    (tmp_path / "synonyms.json").write_text("{not json", encoding="utf-8")
    assert load_vocabularies(str(tmp_path)) is DEFAULT_VOCABULARIES


def test_overrides_extend_builtins(tmp_path):
    (tmp_path / "synonyms.json").write_text(json.dumps({
        "ecosystem_services": {"Medicinal": ["Tea"], "Ornamental": ["garden"]},
        "parts_used": {"stem": "stems"},
        "species_terms": ["Palm"],
    }), encoding="utf-8")

    vocab = load_vocabularies(str(tmp_path))

    assert vocab.services["Medicinal"][-1] == "tea"
    assert "medicine" in vocab.services["Medicinal"]
    # New labels come after the built-ins so built-in precedence holds
    assert list(vocab.services) == ["Medicinal", "Food", "Raw Material", "Ornamental"]
    assert vocab.parts["stem"] == ("stems",)
    assert "palm" in vocab.species_terms and "tree" in vocab.species_terms


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        DEFAULT_VOCABULARIES.services["Shade"] = ("shade",)  # type: ignore[index]
    with pytest.raises(AttributeError):
        DEFAULT_VOCABULARIES.parts = {}  # type: ignore[misc]
