"""Live PDF preview server.

Watches the documents directory, rebuilds PDFs on change and notifies open
preview pages via server-sent events.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
import uvicorn

from env import load_env
from logging_setup import setup_logging
from renderer import WeasyprintRenderer
from renderer_interface import DocumentRenderer
from services.build import build_pdf
from services.notifier import Broadcaster, connected_event, format_sse, update_event
from services.storage import document_stem, ensure_dirs, list_documents
from services.watcher import DocumentWatcher
from settings import Settings, load_settings

logger = logging.getLogger(__name__)

_KEEPALIVE_SECONDS = 15.0
_NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class NoCacheStaticFiles(StaticFiles):
    async def get_response(self, path: str, scope):
        response = await super().get_response(path, scope)
        response.headers.update(_NO_CACHE_HEADERS)
        return response


def make_change_handler(settings: Settings, renderer: DocumentRenderer, broadcaster: Broadcaster):
    def handle_change(path: Path) -> None:
        logger.info("watch.rebuild file=%s", path.name)
        if build_pdf(path, settings, renderer) is None:
            return
        broadcaster.publish(update_event(document_stem(path)))

    return handle_change


def create_app(
    settings: Settings | None = None,
    renderer: DocumentRenderer | None = None,
    *,
    watch: bool = True,
) -> FastAPI:
    settings = settings or load_settings()
    renderer = renderer or WeasyprintRenderer(settings.renderer_command, cwd=settings.root_dir)
    broadcaster = Broadcaster()
    ensure_dirs(settings.documents_dir, settings.output_dir)

    watcher = DocumentWatcher(
        settings.documents_dir,
        make_change_handler(settings, renderer, broadcaster),
        poll_interval=settings.poll_seconds,
        settle_window=settings.settle_seconds,
        debounce=settings.settle_seconds,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if watch:
            watcher.start()
        try:
            yield
        finally:
            if watch:
                watcher.stop()

    app = FastAPI(title="angebotpdf", lifespan=lifespan)
    app.state.settings = settings
    app.state.broadcaster = broadcaster
    app.state.watcher = watcher

    app.mount("/output", NoCacheStaticFiles(directory=settings.output_dir, check_dir=False), name="output")
    app.mount("/assets", StaticFiles(directory=settings.assets_dir, check_dir=False), name="assets")

    @app.get("/api/documents")
    def api_documents() -> list[str]:
        return list_documents(settings.documents_dir)

    @app.get("/events")
    async def events(request: Request) -> StreamingResponse:
        queue = broadcaster.subscribe()

        async def stream():
            try:
                yield format_sse(connected_event())
                while True:
                    if await request.is_disconnected():
                        break
                    try:
                        message = await asyncio.wait_for(queue.get(), timeout=_KEEPALIVE_SECONDS)
                    except asyncio.TimeoutError:
                        yield ": keep-alive\n\n"
                        continue
                    yield message
            finally:
                broadcaster.unsubscribe(queue)

        return StreamingResponse(
            stream(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "Access-Control-Allow-Origin": "*",
            },
        )

    @app.get("/")
    def preview() -> FileResponse:
        if not settings.preview_file.is_file():
            raise HTTPException(status_code=404, detail="Preview page not found")
        return FileResponse(settings.preview_file, media_type="text/html")

    return app


def run() -> None:
    load_env()
    setup_logging()
    settings = load_settings()
    app = create_app(settings)
    logger.info(
        "server.start url=http://localhost:%s documents=%s", settings.port, settings.documents_dir
    )
    uvicorn.run(app, host="127.0.0.1", port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
