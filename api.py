"""NewsDesk API - JSON surface over one NewsSession."""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from newsdesk import __version__
from newsdesk.config import load_config, setup_logging
from newsdesk.models import Settings
from newsdesk.session import NewsSession

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Request models
# ─────────────────────────────────────────────────────────────

class CategoryRequest(BaseModel):
    category: str


class SearchRequest(BaseModel):
    query: str = ""


class PageRequest(BaseModel):
    page: int


class ToggleResponse(BaseModel):
    id: str
    active: bool


def _default_session_factory() -> NewsSession:
    config = load_config()
    setup_logging(config.log_dir, "api")
    return NewsSession.from_config(config)


def create_app(session_factory: Optional[Callable[[], NewsSession]] = None) -> FastAPI:
    """
    Build the API app.

    Args:
        session_factory: Creates the session opened for the app's lifetime
            (defaults to one built from config/settings.yaml and the env)
    """
    factory = session_factory or _default_session_factory

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session = factory()
        app.state.session = session
        await session.start()
        try:
            yield
        finally:
            await session.aclose()

    app = FastAPI(
        title="NewsDesk API",
        description="Aggregated, searchable news feeds",
        version=__version__,
        lifespan=lifespan,
    )

    # Browser clients call from other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_session(request: Request) -> NewsSession:
        return request.app.state.session

    # ─────────────────────────────────────────────────────────────
    # Endpoints
    # ─────────────────────────────────────────────────────────────

    @app.get("/api/health")
    async def health_check():
        """Liveness probe."""
        return {"service": "NewsDesk API", "version": __version__, "status": "ok"}

    @app.get("/api/articles")
    async def get_articles(request: Request):
        """Current page of articles plus loading/error state."""
        return get_session(request).snapshot()

    @app.post("/api/category")
    async def set_category(body: CategoryRequest, request: Request):
        session = get_session(request)
        await session.set_category(body.category)
        return session.snapshot()

    @app.post("/api/search")
    async def set_search(body: SearchRequest, request: Request):
        session = get_session(request)
        await session.set_search_query(body.query)
        return session.snapshot()

    @app.post("/api/page")
    async def set_page(body: PageRequest, request: Request):
        session = get_session(request)
        try:
            await session.set_page(body.page)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return session.snapshot()

    @app.post("/api/refresh")
    async def refresh(request: Request):
        session = get_session(request)
        await session.refresh()
        return session.snapshot()

    @app.post("/api/load-more")
    async def load_more(request: Request):
        session = get_session(request)
        await session.load_more()
        return session.snapshot()

    @app.delete("/api/error")
    async def dismiss_error(request: Request):
        get_session(request).dismiss_error()
        return {"error": None}

    @app.get("/api/bookmarks")
    async def list_bookmarks(request: Request):
        """Bookmarked articles in the current selection."""
        articles = get_session(request).bookmarked_articles()
        return {"articles": [a.model_dump(mode="json") for a in articles]}

    @app.get("/api/read-later")
    async def list_read_later(request: Request):
        articles = get_session(request).read_later_articles()
        return {"articles": [a.model_dump(mode="json") for a in articles]}

    @app.post("/api/bookmarks/{article_id:path}", response_model=ToggleResponse)
    async def toggle_bookmark(article_id: str, request: Request):
        active = get_session(request).toggle_bookmark(article_id)
        return ToggleResponse(id=article_id, active=active)

    @app.post("/api/read-later/{article_id:path}", response_model=ToggleResponse)
    async def toggle_read_later(article_id: str, request: Request):
        active = get_session(request).toggle_read_later(article_id)
        return ToggleResponse(id=article_id, active=active)

    @app.get("/api/settings", response_model=Settings)
    async def get_settings(request: Request):
        return get_session(request).settings

    @app.put("/api/settings", response_model=Settings)
    async def update_settings(
        changes: dict,
        request: Request,
        complete_setup: bool = Query(False, description="Also mark onboarding as done"),
    ):
        """Partial update; unknown keys are ignored, invalid values rejected."""
        session = get_session(request)
        try:
            merged = Settings(**{**session.settings.model_dump(), **changes})
        except ValidationError as e:
            detail = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]
            raise HTTPException(status_code=422, detail=detail)
        if complete_setup:
            return await session.complete_setup(merged)
        return await session.save_settings(merged)

    @app.get("/api/catalog")
    async def get_catalog(request: Request):
        session = get_session(request)
        return {
            "sources": session.catalog.sources(),
            "categories": session.catalog.categories(),
            "needs_setup": session.needs_setup,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
