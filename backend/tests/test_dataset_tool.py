from __future__ import annotations

import importlib.util
import json
from pathlib import Path

from bomso.services import organization_service

from conftest import org_body


def _load_dataset_tool_module():
    script_path = Path(__file__).resolve().parents[1] / "scripts" / "dataset_tool.py"
    spec = importlib.util.spec_from_file_location("dataset_tool_module", script_path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_export_then_import_via_script(store, data_file, tmp_path, capsys):
    module = _load_dataset_tool_module()
    organization_service.create_organization(store, org_body())
    backup = tmp_path / "backup.json"

    assert module.main(["--data-file", str(data_file), "export", str(backup)]) == 0
    assert json.loads(backup.read_text())["organizations"][0]["orgCode"] == "ORG-1"

    target = tmp_path / "restored.json"
    assert module.main(["--data-file", str(target), "import", str(backup)]) == 0
    assert json.loads(target.read_text()) == json.loads(backup.read_text())
    assert "imported 1 organizations, 0 requests" in capsys.readouterr().out


def test_import_rejects_incomplete_document(data_file, tmp_path, capsys):
    module = _load_dataset_tool_module()
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"requests": []}))

    assert module.main(["--data-file", str(data_file), "import", str(bad)]) == 1
    assert "validation_error" in capsys.readouterr().err
    assert not data_file.exists()
