from __future__ import annotations

import os
import secrets
from typing import Any

from core import (
    DAILY,
    WEEKLY,
    current_period_key,
    Item,
    PeriodLifecycle,
    PeriodRecord,
    format_share_text,
    load_config,
    needs_reminder,
    now_local,
    open_daily,
    open_weekly,
    outcome_counts,
    parse_key,
    period_title,
    status_emoji,
    validate_items,
    workspace_root as _workspace_root,
)

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials


# ── HTML helpers ──────────────────────────────────────────────

INDEX_CSS = """
body { font-family: system-ui, sans-serif; margin: 0; background: #f8fafc; color: #0f172a; }
.container { max-width: 1100px; margin: 0 auto; padding: 24px; }
.top { display: flex; align-items: center; justify-content: space-between; }
.grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(320px, 1fr)); gap: 16px; }
.card { background: #fff; border: 1px solid #e2e8f0; border-radius: 8px; padding: 16px; }
.pill { display: inline-block; font-size: 12px; padding: 2px 8px; border-radius: 999px; background: #e2e8f0; }
.muted { color: #64748b; }
.warn { color: #b45309; font-weight: 600; }
"""

def _escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _render_record(record: PeriodRecord | None, empty: str) -> str:
    if record is None:
        return f'<p class="muted">{_escape(empty)}</p>'
    rows = []
    for item in record.items:
        emoji = status_emoji(item.status)
        note = f' <span class="muted">({_escape(item.explanation)})</span>' if item.status == "yellow" and item.explanation else ""
        tag = " <span class=\"pill\">carried over</span>" if item.carried_over else ""
        rows.append(f"<li>{_escape(item.text)} {emoji}{note}{tag}</li>")
    items_html = f"<ol>{''.join(rows)}</ol>" if rows else '<p class="muted">(no items)</p>'
    return (
        f"<h3>{_escape(period_title(record))} <span class=\"pill\">{record.status}</span></h3>"
        f"{items_html}"
    )


# ── Auth ──────────────────────────────────────────────────────

app = FastAPI(title="Accountability", version="0.1.0")

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("ACCOUNTABLE_USERNAME", "")
    expected_password = os.environ.get("ACCOUNTABLE_PASSWORD", "")

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


# ── Request helpers ───────────────────────────────────────────

def _lifecycle(granularity: str) -> PeriodLifecycle:
    if granularity == DAILY:
        return open_daily(_workspace_root())
    if granularity == WEEKLY:
        return open_weekly(_workspace_root())
    raise HTTPException(status_code=404, detail=f"Unknown granularity: {granularity}")


def _check_key(period_key: str, granularity: str) -> str:
    """Validate a date key; weekly keys are moved to their Monday."""
    try:
        return current_period_key(granularity, parse_key(period_key))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {period_key}")


def _items_from_payload(payload: dict[str, Any]) -> list[Item]:
    items_in = payload.get("items")
    errors = validate_items(items_in)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    return [Item.from_dict(d) for d in items_in]


def _record_json(record: PeriodRecord) -> dict[str, Any]:
    d = record.to_dict()
    d["title"] = period_title(record)
    d["counts"] = outcome_counts(record)
    return d


# ── Endpoints ─────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/users")
def api_users(username: str = Depends(get_current_user)) -> dict[str, Any]:
    config = load_config(_workspace_root())
    return {"users": [u.to_dict() for u in config.users]}


@app.get("/api/{owner}/weekly/reminder")
def api_weekly_reminder(owner: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Days since the owner's weekly goals were touched, and whether to nag."""
    root = _workspace_root()
    config = load_config(root)
    days = open_weekly(root).days_since_last_update(owner, now_local(root))
    return {"days": days, "remind": needs_reminder(days, config.reminder_threshold_days)}


@app.get("/api/{owner}/{granularity}/current")
def api_get_current(owner: str, granularity: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    lifecycle = _lifecycle(granularity)
    now = now_local()
    record = lifecycle.get_current(owner, now)
    return {
        "periodKey": lifecycle.current_key(now),
        "record": _record_json(record) if record else None,
    }


@app.post("/api/{owner}/{granularity}/initialize")
def api_initialize(
    owner: str,
    granularity: str,
    payload: dict[str, Any] = Body(default={}),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Create the period's record (carrying items over) unless it exists."""
    lifecycle = _lifecycle(granularity)
    now = now_local()
    period_key = payload.get("periodKey")
    if period_key:
        period_key = _check_key(str(period_key), granularity)
    else:
        period_key = lifecycle.current_key(now)
    record_id = lifecycle.initialize(owner, period_key, now)
    return {"ok": True, "id": record_id, "periodKey": period_key}


@app.get("/api/{owner}/{granularity}/history")
def api_history(owner: str, granularity: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    lifecycle = _lifecycle(granularity)
    return {"records": [_record_json(r) for r in lifecycle.list_all(owner)]}


@app.get("/api/{owner}/{granularity}/{period_key}")
def api_get_record(owner: str, granularity: str, period_key: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    lifecycle = _lifecycle(granularity)
    record = lifecycle.get(owner, _check_key(period_key, granularity))
    if record is None:
        raise HTTPException(status_code=404, detail=f"No {granularity} record for {period_key}")
    return _record_json(record)


@app.put("/api/{owner}/{granularity}/{period_key}")
def api_set_items(
    owner: str,
    granularity: str,
    period_key: str,
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Replace the item list and status (add/remove/edit while drafting)."""
    lifecycle = _lifecycle(granularity)
    items = _items_from_payload(payload)
    record_status = payload.get("status", "draft")
    try:
        record_id = lifecycle.set_items(owner, _check_key(period_key, granularity), items, record_status, now_local())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "id": record_id}


@app.post("/api/{owner}/{granularity}/{period_key}/items")
def api_update_items(
    owner: str,
    granularity: str,
    period_key: str,
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Replace items only (outcome colors and explanations)."""
    lifecycle = _lifecycle(granularity)
    items = _items_from_payload(payload)
    record_id = lifecycle.update_items(owner, _check_key(period_key, granularity), items, now_local())
    return {"ok": record_id is not None, "id": record_id}


@app.post("/api/{owner}/{granularity}/{period_key}/complete")
def api_mark_completed(owner: str, granularity: str, period_key: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    lifecycle = _lifecycle(granularity)
    record_id = lifecycle.mark_completed(owner, _check_key(period_key, granularity), now_local())
    return {"ok": record_id is not None, "id": record_id}


@app.post("/api/{owner}/{granularity}/{period_key}/revert")
def api_revert_to_draft(owner: str, granularity: str, period_key: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    lifecycle = _lifecycle(granularity)
    record_id = lifecycle.revert_to_draft(owner, _check_key(period_key, granularity), now_local())
    return {"ok": record_id is not None, "id": record_id}


@app.get("/raw/{owner}/{granularity}/{period_key}")
def raw_share_text(owner: str, granularity: str, period_key: str, username: str = Depends(get_current_user)) -> PlainTextResponse:
    lifecycle = _lifecycle(granularity)
    record = lifecycle.get(owner, _check_key(period_key, granularity))
    if record is None:
        raise HTTPException(status_code=404, detail=f"No {granularity} record for {period_key}")
    return PlainTextResponse(format_share_text(record))


@app.get("/", response_class=HTMLResponse)
def index(username: str = Depends(get_current_user)) -> HTMLResponse:
    root = _workspace_root()
    config = load_config(root)
    now = now_local(root)
    daily = open_daily(root)
    weekly = open_weekly(root)

    cards = []
    for user in config.users:
        days = weekly.days_since_last_update(user.id, now)
        reminder = ""
        if needs_reminder(days, config.reminder_threshold_days):
            reminder = f'<p class="warn">Weekly goals untouched for {days} days.</p>'
        cards.append(
            f"""
    <div class="card">
      <h2 style="color:{_escape(user.color)}">{_escape(user.name)}</h2>
      {reminder}
      {_render_record(daily.get_current(user.id, now), "No list for today yet.")}
      {_render_record(weekly.get_current(user.id, now), "No goals for this week yet.")}
    </div>"""
        )
    if not cards:
        cards.append('<p class="muted">No users configured. Add them to config.yaml.</p>')

    html = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Accountability</title>
  <style>{INDEX_CSS}</style>
</head>
<body>
  <div class="container">
    <header class="top">
      <h1>Accountability</h1>
      <div class="pill"><code>{_escape(str(root))}</code></div>
    </header>
    <section class="grid">{''.join(cards)}
    </section>
  </div>
</body>
</html>"""
    return HTMLResponse(html)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.environ.get("ACCOUNTABLE_HOST", "127.0.0.1"), port=int(os.environ.get("ACCOUNTABLE_PORT", "8000")))
