# tests/test_exporter.py
"""Export / import of a single profile."""

from __future__ import annotations

import io
import json

import pytest

from core.errors import InvalidInputError, InvalidProfileNameError, ProfileExistsError, ValidationError
from core.exporter import EXPORT_VERSION, export_profile, import_profile


def _export(pm, name) -> dict:
    buf = io.StringIO()
    export_profile(pm, name, buf)
    return json.loads(buf.getvalue())


def test_export_contains_all_parts(pm, make_profile):
    make_profile("work", instructions="rules", services={"s": {"command": "s"}})

    data = _export(pm, "work")

    assert data["version"] == EXPORT_VERSION
    assert data["name"] == "work"
    assert data["settings"] == {"model": "model-work"}
    assert data["claude_md"] == "rules"
    assert data["services"] == {"s": {"command": "s"}}
    assert data["exported_at"].endswith("Z")


def test_export_omits_empty_optional_parts(pm, make_profile):
    make_profile("bare")
    data = _export(pm, "bare")
    assert "claude_md" not in data
    assert "services" not in data


def test_import_under_new_name(pm, make_profile):
    make_profile("work", instructions="rules", services={"s": {"command": "s"}})
    buf = io.StringIO()
    export_profile(pm, "work", buf)
    buf.seek(0)

    imported = import_profile(pm, buf, "work-laptop")

    loaded = pm.load("work-laptop")
    assert imported.name == "work-laptop"
    assert loaded.settings == pm.load("work").settings
    assert loaded.instructions == "rules"
    assert loaded.services == {"s": {"command": "s"}}


def test_import_refuses_existing_name(pm, make_profile):
    make_profile("work")
    buf = io.StringIO()
    export_profile(pm, "work", buf)
    buf.seek(0)

    with pytest.raises(ProfileExistsError):
        import_profile(pm, buf)


@pytest.mark.parametrize("payload,exc", [
    ("not json", InvalidInputError),
    ("[]", InvalidInputError),
    (json.dumps({"version": "0.9", "name": "x", "settings": {}}), InvalidInputError),
    (json.dumps({"version": EXPORT_VERSION, "name": "x"}), InvalidInputError),
    (json.dumps({"version": EXPORT_VERSION, "name": "x", "settings": {}, "services": []}), InvalidInputError),
    (json.dumps({"version": EXPORT_VERSION, "name": "bad name", "settings": {}}), InvalidProfileNameError),
    (json.dumps({"version": EXPORT_VERSION, "name": "x", "settings": {"model": "m" * 300}}), ValidationError),
])
def test_import_rejects_bad_documents(pm, payload, exc):
    with pytest.raises(exc):
        import_profile(pm, io.StringIO(payload))
    assert pm.list() == []
