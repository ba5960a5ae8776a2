"""Tests for core/hooks.py — hook system."""

import json

import yaml

from core.hooks import load_hooks_config, run_hooks


def _write_hooks(workspace, config):
    (workspace / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")


def test_run_hooks_no_config(workspace):
    """No hooks.yaml -> no hooks run."""
    results = run_hooks("on_toast", {"message": "Deleted."}, workspace)
    assert results == []


def test_run_hooks_with_echo(workspace):
    """Test hook that echoes context via stdin."""
    _write_hooks(workspace, {
        "on_xp_award": [
            "cat"  # echo back stdin
        ]
    })

    results = run_hooks("on_xp_award", {"xp": 15, "base": 10, "bonus": 5}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == 0
    output = json.loads(results[0]["stdout"])
    assert output["xp"] == 15
    assert output["hook_point"] == "on_xp_award"


def test_run_hooks_invalid_hook_point(workspace):
    _write_hooks(workspace, {"on_startup": ["cat"]})
    results = run_hooks("on_startup", {}, workspace)
    assert results == []


def test_run_hooks_nonzero_exit(workspace):
    _write_hooks(workspace, {"on_level_up": ["exit 3"]})
    results = run_hooks("on_level_up", {"level": 2}, workspace)
    assert results[0]["exit_code"] == 3


def test_run_hooks_skips_malformed_entries(workspace):
    _write_hooks(workspace, {"on_toast": [42, {"command": ""}, "true"]})
    results = run_hooks("on_toast", {"message": "hi"}, workspace)
    assert [r["command"] for r in results] == ["true"]


def test_run_hooks_timeout(workspace):
    """Test hook timeout protection."""
    _write_hooks(workspace, {
        "on_achievement": [
            {"command": "sleep 10", "timeout": 1}
        ]
    })

    results = run_hooks("on_achievement", {"keys": ["first_done"]}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == -1
    assert "timed out" in results[0].get("error", "").lower()


def test_load_hooks_config_bad_yaml(workspace):
    (workspace / "hooks.yaml").write_text("on_toast: [unclosed", encoding="utf-8")
    assert load_hooks_config(workspace) == {}
