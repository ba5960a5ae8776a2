"""Shell-command hooks for TodoQuest events.

Hooks let outside tools react to ledger events: play a sound when XP is
awarded, forward toast messages to a desktop notifier, and so on.
Configured via hooks.yaml in the workspace:

    on_xp_award:
      - paplay ~/sounds/ding.oga
    on_toast:
      - command: notify-send TodoQuest "$(jq -r .message)"
        timeout: 5

Hook points:
- on_toast: every ledger change that produced a toast message
- on_xp_award: a completion awarded XP (only while sound is enabled)
- on_level_up: the level went up
- on_achievement: one or more achievements were unlocked

QuestStore hands hooks to a HookRunner, which runs them in order on a
background thread so a slow command never holds up the caller.
"""

from __future__ import annotations

import json
import logging
import queue
import subprocess
import threading
from pathlib import Path
from typing import Any

import yaml

from core.fileio import read_yaml
from core.workspace import hooks_config_path, workspace_root

logger = logging.getLogger(__name__)

VALID_HOOK_POINTS = {
    "on_toast",
    "on_xp_award",
    "on_level_up",
    "on_achievement",
}

DEFAULT_TIMEOUT = 10


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    """Load hooks configuration from hooks.yaml."""
    if root is None:
        root = workspace_root()
    path = hooks_config_path(root)
    if not path.exists():
        return {}
    try:
        return read_yaml(path)
    except (OSError, yaml.YAMLError):
        logger.warning("Ignoring unreadable hooks config %s", path)
        return {}


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run all hooks registered for a given hook point.

    Context is passed as JSON via stdin to each hook subprocess.
    Returns list of results with stdout/stderr and exit codes.
    """
    if hook_point not in VALID_HOOK_POINTS:
        return []

    if root is None:
        root = workspace_root()

    config = load_hooks_config(root)
    hooks = config.get(hook_point, [])

    if not hooks or not isinstance(hooks, list):
        return []

    results = []
    context_json = json.dumps({"hook_point": hook_point, **context}, ensure_ascii=False)

    for hook in hooks:
        if isinstance(hook, str):
            command = hook
            timeout = DEFAULT_TIMEOUT
        elif isinstance(hook, dict):
            command = hook.get("command", "")
            timeout = hook.get("timeout", DEFAULT_TIMEOUT)
        else:
            continue

        if not command:
            continue

        result: dict[str, Any] = {"command": command, "hook_point": hook_point}
        try:
            proc = subprocess.run(
                command,
                shell=True,
                input=context_json,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=str(root),
            )
            result["exit_code"] = proc.returncode
            result["stdout"] = proc.stdout[:4096]  # Cap output
            result["stderr"] = proc.stderr[:4096]
            if proc.returncode != 0:
                logger.warning("Hook %s exited %s: %s", command, proc.returncode, result["stderr"][:200])
        except subprocess.TimeoutExpired:
            result["exit_code"] = -1
            result["error"] = f"Hook timed out after {timeout}s"
            logger.warning("Hook %s timed out after %ss", command, timeout)
        except OSError as e:
            result["exit_code"] = -1
            result["error"] = str(e)
            logger.warning("Hook %s failed: %s", command, e)

        results.append(result)

    return results


class HookRunner:
    """Runs hooks on a background thread, one at a time, in submission order.

    ``submit`` returns immediately. The worker thread exits once the queue is
    empty and is started again by the next submission.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root if root is not None else workspace_root()
        self._queue: queue.Queue[tuple[str, dict[str, Any]]] = queue.Queue()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    def submit(self, hook_point: str, context: dict[str, Any]) -> None:
        with self._lock:
            self._queue.put((hook_point, context))
            if self._thread is None:
                self._thread = threading.Thread(target=self._drain, name="todoquest-hooks", daemon=True)
                self._thread.start()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until every submitted hook has run. False if *timeout* ran out first."""
        with self._queue.all_tasks_done:
            return self._queue.all_tasks_done.wait_for(
                lambda: self._queue.unfinished_tasks == 0, timeout
            )

    def _drain(self) -> None:
        while True:
            with self._lock:
                try:
                    hook_point, context = self._queue.get_nowait()
                except queue.Empty:
                    self._thread = None
                    return
            try:
                run_hooks(hook_point, context, self.root)
            except Exception:
                logger.exception("Hook point %s failed", hook_point)
            finally:
                self._queue.task_done()
