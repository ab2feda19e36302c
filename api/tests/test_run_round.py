import importlib.util
import json
import sys
from pathlib import Path

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "run_round.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("run_round_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class _FakeResult:
    def as_dict(self):
        return {"generation_id": 1, "pairs": [[1, 2]], "leftover": None}


def _patch(monkeypatch, script, argv):
    built = []

    class _FakeController:
        def __init__(self, session_factory, **kwargs):
            built.append(kwargs)

        def trigger(self):
            return _FakeResult()

    monkeypatch.setattr(script, "RoundController", _FakeController)
    monkeypatch.setattr(script, "init_db", lambda: None)
    monkeypatch.setattr(script, "configure_logging", lambda: None)
    monkeypatch.setattr(sys, "argv", ["run_round.py", *argv])
    return built


def test_matching_timeout_flag_is_passed_to_the_controller(monkeypatch, capsys):
    script = _load_script()
    built = _patch(monkeypatch, script, ["--matching-timeout", "2.5"])

    assert script.main() == 0

    assert built == [{"matching_timeout": 2.5}]
    assert json.loads(capsys.readouterr().out)["generation_id"] == 1


def test_controller_defaults_apply_without_flag(monkeypatch):
    script = _load_script()
    built = _patch(monkeypatch, script, [])

    assert script.main() == 0

    assert built == [{}]
