"""
Sentinel Suite - command line tests

Each test writes a synthetic save to a temp dir and drives cli.main().

Can be run standalone: python test_cli.py
Or via main runner: python tests.py
"""

import io
import json
import tempfile
from contextlib import contextmanager, redirect_stderr, redirect_stdout
from pathlib import Path

import pytest

from save_fixtures import isolated_home, new_document, write_save_file
from sentinel_suite.cli import main
from sentinel_suite.config import Preferences, save_preferences
from sentinel_suite.save_editor.save_manager import SaveDocument


@contextmanager
def workspace(doc=None):
    """Temp dir holding test.sav, with preferences isolated inside it."""
    with tempfile.TemporaryDirectory() as tmp:
        with isolated_home(Path(tmp) / "home"):
            yield write_save_file(Path(tmp), doc=doc)


def run(*argv):
    """Run the CLI, returning (exit code, stdout, stderr)."""
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        try:
            code = main([str(a) for a in argv])
        except SystemExit as e:
            code = e.code
    return code, out.getvalue(), err.getvalue()


def test_validate():
    with workspace() as path:
        code, out, _ = run("validate", path)
        assert code == 0
        assert "VALID" in out

        data = bytearray(path.read_bytes())
        data[40000] ^= 0xFF
        path.write_bytes(bytes(data))
        code, out, _ = run("validate", path)
        assert code == 1
        assert "MISMATCH" in out


def test_validate_json():
    with workspace() as path:
        code, out, _ = run("--format", "json", "validate", path)
        report = json.loads(out)
        assert code == 0
        assert report["valid"] and report["magic"]
        assert [s["valid"] for s in report["slots"]] == [True, True]


def test_inspect_json():
    doc = new_document()
    doc.set_gold_on_hand(321)
    doc.set_vocation_unlocked(8, True)
    with workspace(doc) as path:
        code, out, _ = run("--format", "json", "inspect", path)
        data = json.loads(out)
        assert code == 0
        assert data["gold_on_hand"] == 321
        assert data["unlocked_vocations"] == ["Paladin"]
        assert [c["name"] for c in data["characters"]] == ["Reserve", "Hero", "Ruckus", "Ivy"]


def test_character_by_name():
    with workspace() as path:
        code, out, _ = run("--format", "json", "character", path, "her")
        assert code == 0
        info = json.loads(out)
        assert info["index"] == 1 and info["hero"]

        code, _, err = run("character", path, "Nobody")
        assert code == 1
        assert "No character matching" in err


def test_set_gold_writes_backup():
    with workspace() as path:
        original = path.read_bytes()
        code, out, _ = run("set-gold", path, "5000")
        assert code == 0
        assert SaveDocument.from_file(path).gold_on_hand == 5000
        assert SaveDocument.from_file(path).validate()
        assert path.with_name("test.sav.bak").read_bytes() == original

        run("set-gold", path, "99999999999", "--bank", "--no-backup")
        assert SaveDocument.from_file(path).gold_in_bank == 1_000_000_000


def test_output_leaves_input_untouched():
    with workspace() as path:
        original = path.read_bytes()
        target = path.with_name("edited.sav")
        code, _, _ = run("set-medals", path, "12", "-o", target)
        assert code == 0
        assert path.read_bytes() == original
        assert SaveDocument.from_file(target).mini_medals == 12


def test_set_item_by_name():
    with workspace() as path:
        code, _, _ = run("set-item", path, "Medicinal herb", "150")
        assert code == 0
        doc = SaveDocument.from_file(path)
        assert doc.item_count(1) == 99

        code, _, _ = run("set-item", path, "1", "0")
        assert code == 0
        assert SaveDocument.from_file(path).item_count(1) == 0


def test_character_edits():
    with workspace() as path:
        assert run("set-name", path, "1", "Aquila")[0] == 0
        assert run("set-skill", path, "Aquila", "Swords", "40")[0] == 0
        assert run("set-playtime", path, "12:34:56")[0] == 0
        assert run("set-playtime", path, "1:2:3", "--multiplayer")[0] == 0
        assert run("unlock-vocation", path, "Sage")[0] == 0

        doc = SaveDocument.from_file(path)
        assert doc.validate()
        assert doc.character_name(1) == "Aquila"
        assert doc.character_skill_allocation(1, 12) == 40
        assert str(doc.playtime()) == "12:34:56"
        assert str(doc.multiplayer_time()) == "1:02:03"
        assert doc.vocation_unlocked(11)


def test_bad_time_is_a_usage_error():
    with workspace() as path:
        code, _, err = run("set-playtime", path, "12:34")
        assert code == 2
        assert "H:M:S" in err


def test_slot_option():
    with workspace() as path:
        run("--slot", "1", "set-medals", path, "3")
        doc = SaveDocument.from_file(path)
        assert doc.mini_medals == 0
        doc.active_slot = 1
        assert doc.mini_medals == 3


def test_edit_refuses_invalid_file_without_force():
    with workspace() as path:
        data = bytearray(path.read_bytes())
        data[20] ^= 0xFF
        path.write_bytes(bytes(data))

        code, _, err = run("set-gold", path, "10")
        assert code == 1
        assert "--force" in err

        code, _, _ = run("fix-checksums", path, "--force")
        assert code == 0
        assert SaveDocument.from_file(path).validate()


def test_malformed_item_catalog_is_reported():
    with workspace() as path:
        bad = path.parent / "items.json"
        bad.write_text("{ not json", encoding="utf-8")
        save_preferences(Preferences(item_catalog=str(bad)))

        code, out, err = run("inspect", path)
        assert code == 1
        assert "ERROR: Failed to load item catalog" in err
        assert "Traceback" not in err


def test_missing_file():
    code, _, err = run("validate", "/nonexistent/none.sav")
    assert code == 1
    assert "ERROR" in err


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
