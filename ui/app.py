from __future__ import annotations

import logging
import os
import secrets
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from core import (
    QuestStore,
    ensure_workspace,
    fmt_date_input,
    load_config,
    setup_logging,
    workspace_root,
)
from core.models import Quest

logger = logging.getLogger(__name__)


app = FastAPI(title="TodoQuest API", version="0.1.0")

security = HTTPBasic(auto_error=False)


# ── Auth ──────────────────────────────────────────────────────


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("TODOQUEST_USERNAME", "")
    expected_password = os.environ.get("TODOQUEST_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def get_store() -> QuestStore:
    """One store per request, loaded fresh from the workspace state file."""
    return QuestStore(workspace_root())


# ── Helpers ───────────────────────────────────────────────────


def _quest_out(q: Quest) -> dict[str, Any]:
    d = q.to_dict()
    d["dueDate"] = fmt_date_input(q.due_at)
    return d


def _require_quest(store: QuestStore, quest_id: str) -> None:
    if store.find(quest_id) is None:
        raise HTTPException(status_code=404, detail=f"Quest not found: {quest_id}")


def _envelope(store: QuestStore, **extra: Any) -> dict[str, Any]:
    return {"ok": True, "toast": store.state.ui.toast, "hud": store.hud(), **extra}


# ── Endpoints ─────────────────────────────────────────────────


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/state")
def api_get_state(username: str = Depends(get_current_user), store: QuestStore = Depends(get_store)) -> dict[str, Any]:
    return {"state": store.state.to_dict(), "hud": store.hud()}


@app.get("/api/quests")
def api_list_quests(
    filter: str = "all",
    q: str = "",
    sort: str = "smart",
    username: str = Depends(get_current_user),
    store: QuestStore = Depends(get_store),
) -> dict[str, Any]:
    quests = store.view(filter, q, sort)
    return {"quests": [_quest_out(x) for x in quests], "count": len(quests)}


@app.post("/api/quests")
def api_add_quest(
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    store: QuestStore = Depends(get_store),
) -> dict[str, Any]:
    quest = store.add(str(payload.get("text", "")))
    if quest is None:
        raise HTTPException(status_code=400, detail="Quest text must not be empty")
    return _envelope(store, quest=_quest_out(quest))


@app.put("/api/quests/{quest_id}")
def api_edit_quest(
    quest_id: str,
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    store: QuestStore = Depends(get_store),
) -> dict[str, Any]:
    _require_quest(store, quest_id)
    form: dict[str, Any] = {
        k: str(payload[k] or "") for k in ("text", "notes", "difficulty", "priority", "due") if k in payload
    }
    if "tags" in payload:
        tags = payload["tags"]
        form["tags"] = [str(t) for t in tags] if isinstance(tags, list) else str(tags or "")
    store.edit(quest_id, **form)
    return _envelope(store, quest=_quest_out(store.find(quest_id)))


@app.post("/api/quests/{quest_id}/toggle")
def api_toggle_quest(
    quest_id: str,
    username: str = Depends(get_current_user),
    store: QuestStore = Depends(get_store),
) -> dict[str, Any]:
    _require_quest(store, quest_id)
    award = store.toggle(quest_id)
    result: dict[str, Any] = {"quest": _quest_out(store.find(quest_id))}
    if award is not None:
        result["award"] = {
            "xp": award.xp_gained,
            "base": award.base_xp,
            "bonus": award.bonus,
            "level": award.level,
            "title": award.title,
        }
    return _envelope(store, **result)


@app.delete("/api/quests/{quest_id}")
def api_delete_quest(
    quest_id: str,
    username: str = Depends(get_current_user),
    store: QuestStore = Depends(get_store),
) -> dict[str, Any]:
    _require_quest(store, quest_id)
    store.delete(quest_id)
    return _envelope(store)


@app.post("/api/undo")
def api_undo(username: str = Depends(get_current_user), store: QuestStore = Depends(get_store)) -> dict[str, Any]:
    return _envelope(store, undone=store.undo())


@app.post("/api/reset")
def api_reset(username: str = Depends(get_current_user), store: QuestStore = Depends(get_store)) -> dict[str, Any]:
    store.reset_all()
    return _envelope(store)


@app.post("/api/factory_reset")
def api_factory_reset(username: str = Depends(get_current_user), store: QuestStore = Depends(get_store)) -> dict[str, Any]:
    store.factory_reset()
    return _envelope(store)


@app.get("/api/achievements")
def api_achievements(username: str = Depends(get_current_user), store: QuestStore = Depends(get_store)) -> dict[str, Any]:
    items = store.achievements_view()
    return {
        "achievements": items,
        "unlocked": sum(1 for a in items if a["unlocked"]),
        "total": len(items),
        "level": store.level_info().level,
    }


@app.get("/api/settings")
def api_get_settings(username: str = Depends(get_current_user), store: QuestStore = Depends(get_store)) -> dict[str, Any]:
    return {"profile": store.state.profile.to_dict(), "settings": store.state.settings.to_dict()}


@app.put("/api/settings")
def api_save_settings(
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    store: QuestStore = Depends(get_store),
) -> dict[str, Any]:
    store.save_settings(
        name=payload.get("name"),
        color=payload.get("color"),
        sound=payload.get("sound"),
        reduce_motion=payload.get("reduceMotion"),
    )
    return _envelope(store, profile=store.state.profile.to_dict(), settings=store.state.settings.to_dict())


# ── Entry point ───────────────────────────────────────────────


def main() -> None:
    import uvicorn

    root = ensure_workspace(workspace_root())
    config = load_config(root)
    setup_logging(root, config.log_level)
    host = os.environ.get("TODOQUEST_HOST", "127.0.0.1")
    port = int(os.environ.get("TODOQUEST_PORT", "8765"))
    logger.info("Serving TodoQuest API on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
