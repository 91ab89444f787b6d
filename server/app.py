"""FastAPI application: the conversation page and its form action."""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Cookie, FastAPI, Form
from fastapi.responses import FileResponse, JSONResponse

from shared import protocol
from server.llm.gemini_client import GeminiClient
from server.assistant.session import SessionStore
from server.assistant.metrics import MetricsLogger
from server.responder import ConversationResponder, TextGenerator

log = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    if _metrics is not None:
        _metrics.flush()


app = FastAPI(title="Sprechpartner", lifespan=_lifespan)

# Global references set by create_app()
_config: dict = {}
_sessions: SessionStore | None = None
_responder: ConversationResponder | None = None
_metrics: MetricsLogger | None = None


def create_app(config: dict, llm: TextGenerator | None = None) -> FastAPI:
    """Initialize server components and return the configured FastAPI app."""
    global _config, _sessions, _responder, _metrics

    _config = config
    if llm is None:
        log.info("Initializing Gemini client (model=%s)...", config.get("llm", {}).get("model"))
        llm = GeminiClient(config.get("llm", {}))

    _metrics = MetricsLogger(config.get("metrics", {}))
    _sessions = SessionStore(config.get("conversation", {}))
    _responder = ConversationResponder(llm=llm, metrics=_metrics, config=config)
    log.info("Conversation mode: %s", _responder.mode)

    return app


def _set_session_cookie(response: JSONResponse, session_id: str) -> None:
    response.set_cookie(
        protocol.SESSION_COOKIE,
        session_id,
        httponly=True,
        samesite="lax",
    )


@app.get("/")
async def index():
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")


@app.get("/api/settings")
async def settings():
    return protocol.make_settings(_responder.mode, _config.get("speech", {}))


@app.post("/")
async def action(
    transcript: str | None = Form(None),
    session_id: str | None = Cookie(None),
):
    """Answer one transcript from the page's speech recognition."""
    if not transcript:
        return JSONResponse(protocol.make_error(protocol.ERROR_NO_TRANSCRIPT), status_code=400)

    try:
        session = _sessions.get_or_create(session_id)
        log.info("Transcript from %s: '%s'", session.id, transcript[:80])
        reply = await asyncio.to_thread(_responder.respond, transcript, session)
    except Exception:
        log.exception("Error processing transcript")
        return JSONResponse(protocol.make_error(protocol.ERROR_PROCESSING_FAILED), status_code=500)

    response = JSONResponse(reply)
    if session.id != session_id:
        _set_session_cookie(response, session.id)
    return response


@app.delete("/session")
async def clear_session(session_id: str | None = Cookie(None)):
    """Forget the caller's conversation history."""
    if session_id:
        _sessions.drop(session_id)
    response = JSONResponse(protocol.make_session_cleared())
    response.delete_cookie(protocol.SESSION_COOKIE)
    return response
