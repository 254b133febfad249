from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .errors import EntryNotFound, EntryValidationError
from .models import SUGGESTED_CATEGORIES, EntryChanges, EntryDraft
from .session import Session, build_store
from .store import DocumentStore
from .view import SortKey, categories, project


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    session = Session(settings=settings, store=store or build_store(settings))

    app = FastAPI(title="ToolShelf")
    app.state.session = session

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        await session.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        await session.close()

    @app.get("/")
    async def health_check():
        return {"status": "ok", "tools": len(session.catalog)}

    @app.get("/api/tools")
    async def list_tools(category: str = "", sort: SortKey = SortKey.DATE_ADDED):
        entries = session.catalog.entries
        rows = project(entries, category=category or None, sort=sort)
        return {
            "tools": [e.public() for e in rows],
            "categories": categories(entries),
            "count": len(rows),
        }

    @app.get("/api/categories")
    async def list_categories():
        return {
            "categories": categories(session.catalog.entries),
            "suggested": SUGGESTED_CATEGORIES,
        }

    @app.post("/api/tools", status_code=201)
    async def add_tool(body: EntryDraft):
        try:
            pending = session.catalog.add(body)
        except EntryValidationError as e:
            raise HTTPException(400, str(e))
        return {"tool": pending.entry.public()}

    @app.patch("/api/tools/{tool_id}")
    async def edit_tool(tool_id: str, body: EntryChanges):
        try:
            entry = session.catalog.edit(tool_id, body)
        except EntryNotFound as e:
            raise HTTPException(404, str(e))
        except EntryValidationError as e:
            raise HTTPException(400, str(e))
        return {"tool": entry.public()}

    @app.post("/api/tools/{tool_id}/use")
    async def use_tool(tool_id: str):
        try:
            entry = session.catalog.mark_used(tool_id)
        except EntryNotFound as e:
            raise HTTPException(404, str(e))
        return {"tool": entry.public()}

    @app.delete("/api/tools/{tool_id}")
    async def delete_tool(tool_id: str):
        try:
            entry = await session.deletes.request(tool_id)
        except EntryNotFound as e:
            raise HTTPException(404, str(e))
        return {"ok": True, "tool": entry.public(), "undo_seconds": settings.undo_seconds}

    @app.post("/api/tools/{tool_id}/undo")
    async def undo_delete(tool_id: str):
        entry = session.deletes.undo(tool_id)
        return {"restored": entry is not None, "tool": entry.public() if entry else None}

    @app.post("/api/reload")
    async def reload_tools():
        ok = await session.catalog.load()
        return {"ok": ok, "tools": len(session.catalog)}

    @app.get("/api/notifications")
    async def drain_notifications():
        return [n.model_dump(mode="json") for n in session.notifier.drain()]

    return app
