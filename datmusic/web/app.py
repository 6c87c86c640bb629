"""FastAPI app exposing the datmusic search and media endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
import os
from threading import RLock
from typing import Callable, Dict, List, Optional
import logging

import requests
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import FileResponse, RedirectResponse
from pydantic import BaseModel

from ..core.errors import DatmusicError, NotFound
from .runtime import DatmusicRuntime, build_runtime

logger = logging.getLogger(__name__)

AUDIO_HEADERS = {
    "Cache-Control": "private",
    "Content-Description": "File Transfer",
}


class PublicAudioItem(BaseModel):
    artist: str
    title: str
    duration: int
    download: str
    stream: str


class SearchResponse(BaseModel):
    status: str = "ok"
    data: List[PublicAudioItem]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _http_error(exc: DatmusicError) -> HTTPException:
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc)
    return HTTPException(status_code=exc.status_code, detail=exc.public_message)


def create_app(runtime: Optional[DatmusicRuntime] = None, runtime_factory: Callable[[], DatmusicRuntime] = build_runtime) -> FastAPI:
    runtime_lock = RLock()
    holder: Dict[str, Optional[DatmusicRuntime]] = {"runtime": runtime}

    def get_runtime() -> DatmusicRuntime:
        with runtime_lock:
            if holder["runtime"] is None:
                holder["runtime"] = runtime_factory()
            return holder["runtime"]

    app = FastAPI(title="datmusic API", version="1.0.0")

    @app.on_event("shutdown")
    def close_runtime() -> None:
        with runtime_lock:
            if holder["runtime"] is not None:
                holder["runtime"].close()

    @app.get("/health")
    def health() -> Dict:
        rt = get_runtime()
        return {"ok": True, "time": _utc_now_iso(), "accounts": len(rt.credentials)}

    @app.get("/search", response_model=SearchResponse)
    def search(
        request: Request,
        q: str = Query(..., min_length=1),
        page: int = Query(0, ge=0),
    ) -> Dict:
        rt = get_runtime()
        try:
            source = rt.audio_source(public_url=str(request.base_url).rstrip("/"))
            data = source.search(q, page)
        except DatmusicError as exc:
            raise _http_error(exc) from exc
        except requests.RequestException as exc:
            logger.error("Upstream search request failed: %s", exc)
            raise HTTPException(status_code=500, detail="Upstream request failed.") from exc
        return {"status": "ok", "data": data}

    @app.get("/bytes/{key}/{item_id}")
    def item_bytes(key: str, item_id: str) -> int:
        try:
            return get_runtime().media_fetcher.byte_length(key, item_id)
        except DatmusicError as exc:
            raise _http_error(exc) from exc

    @app.get("/stream/{key}/{item_id}")
    def stream(key: str, item_id: str):
        try:
            static_path = get_runtime().media_fetcher.stream(key, item_id)
        except DatmusicError as exc:
            raise _http_error(exc) from exc
        return RedirectResponse(url=f"/{static_path}", status_code=302)

    @app.get("/mp3/{name}")
    def static_mp3(name: str):
        storage = get_runtime().media_fetcher.storage
        try:
            if not storage.exists(name):
                raise NotFound("Media file not found.")
        except ValueError as exc:
            raise HTTPException(status_code=404, detail=NotFound.public_message) from exc
        except DatmusicError as exc:
            raise _http_error(exc) from exc
        return FileResponse(storage.path(name), media_type="audio/mpeg")

    @app.get("/{key}/{item_id}")
    def download(key: str, item_id: str):
        fetcher = get_runtime().media_fetcher
        try:
            item = fetcher.resolve(key, item_id)
            path = fetcher.fetch_or_serve(item)
        except DatmusicError as exc:
            raise _http_error(exc) from exc
        return FileResponse(
            path,
            media_type="audio/mpeg",
            filename=fetcher.download_name(item),
            headers=AUDIO_HEADERS,
        )

    return app


app = create_app()


def main():
    import uvicorn

    logging.basicConfig(
        level=os.environ.get("DATMUSIC_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("DATMUSIC_HOST", "127.0.0.1")
    port = int(os.environ.get("DATMUSIC_PORT", "8000"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
