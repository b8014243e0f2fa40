import json

import pytest

from exambank.services.syllabus import DEFAULT_SYLLABUS, SyllabusConfig, load_syllabus, normalize


@pytest.mark.parametrize("raw,expected", [
    ("Cr. P. C.-Criminal Procedure Code", "cr p c criminal procedure code"),
    ("Labour & Industrial Law", "labour and industrial law"),
    ("  Law of\n   Tort (General) ", "law of tort general"),
    ("Indian Penal Code-IPC", "indian penal code ipc"),
    ("CONSTITUTIONAL LAW", "constitutional law"),
    ("", ""),
])
def test_normalize(raw, expected):
    assert normalize(raw) == expected


def test_normalize_is_idempotent():
    raw = "Professional Ethics & Cases of Professional Misconduct under Bar Council of India Rules"
    assert normalize(normalize(raw)) == normalize(raw)


def test_quota_direct_and_normalized_lookup():
    cfg = SyllabusConfig({"Cr. P. C.-Criminal Procedure Code": 10, "Law of Tort": 5})
    assert cfg.quota_for("Cr. P. C.-Criminal Procedure Code") == 10
    assert cfg.quota_for("cr p c - criminal procedure code") == 10
    assert cfg.quota_for("LAW OF\nTORT") == 5


def test_quota_with_normalized_keys():
    cfg = SyllabusConfig({"labour and industrial law": 4})
    assert cfg.quota_for("Labour & Industrial Law") == 4


def test_unknown_and_empty_area_have_zero_quota():
    cfg = SyllabusConfig({"Family Law": 8})
    assert cfg.quota_for("Public Interest Litigation") == 0
    assert cfg.quota_for("") == 0
    assert "Public Interest Litigation" not in cfg
    assert "family law" in cfg


def test_syllabus_is_read_only():
    quotas = {"Family Law": 8}
    cfg = SyllabusConfig(quotas)
    quotas["Family Law"] = 1
    assert cfg.quota_for("Family Law") == 8
    with pytest.raises(TypeError):
        cfg._quotas["Family Law"] = 2


def test_default_syllabus():
    cfg = load_syllabus()
    assert len(cfg) == len(DEFAULT_SYLLABUS) == 18
    assert cfg.total_required == 88
    assert cfg.quota_for("Constitutional Law") == 10
    assert cfg.quota_for("Cr P C Criminal Procedure Code") == 10


def test_load_syllabus_from_file(tmp_path):
    path = tmp_path / "syllabus.json"
    path.write_text(json.dumps({"Family Law": 3, "Company Law": 0}))
    cfg = load_syllabus(path)
    assert cfg.total_required == 3
    assert cfg.quota_for("family law") == 3
    assert cfg.quota_for("Company Law") == 0


@pytest.mark.parametrize("content", ["[1, 2]", '{"Family Law": -1}', '{"Family Law": "3"}', '{"Family Law": true}'])
def test_load_syllabus_rejects_bad_content(tmp_path, content):
    path = tmp_path / "syllabus.json"
    path.write_text(content)
    with pytest.raises(ValueError):
        load_syllabus(path)


def test_iterates_configured_names_in_order():
    cfg = SyllabusConfig({"Family Law": 8, "Company Law": 2})
    assert list(cfg) == ["Family Law", "Company Law"]
    assert len(cfg) == 2
    assert cfg.total_required == 10
