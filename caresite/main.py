from __future__ import annotations
import logging
from pathlib import Path
from fastapi import APIRouter, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .errors import MailError, StorageError, ValidationError
from .services import quiz
from .services.mailer import Mailer
from .services.presence import Presence
from .services.store import MessageStore

log = logging.getLogger("caresite")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

router = APIRouter()


async def read_body(request: Request) -> dict:
    """JSON or form-encoded body as a plain dict; anything unreadable is treated as empty."""
    ctype = (request.headers.get("content-type") or "").lower()
    if ctype.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
    form = await request.form()
    return dict(form)


def _text(data: dict, key: str) -> str:
    v = data.get(key)
    return v.strip() if isinstance(v, str) else ""


@router.post("/contact")
async def contact(request: Request):
    data = await read_body(request)
    name = _text(data, "name")
    email = _text(data, "email")
    message = _text(data, "message")

    log.info("Form submission: name=%s email=%s", name, email)

    mailer: Mailer = request.app.state.mailer
    try:
        await run_in_threadpool(mailer.send_contact, name, email, message)
    except MailError as e:
        log.error("Error sending email: %s", e)
        return PlainTextResponse("Something went wrong. Please try again later.", status_code=500)

    return templates.TemplateResponse(request, "contact_thanks.html", {"name": name})


@router.post("/quiz", response_class=HTMLResponse)
async def quiz_submit(request: Request):
    data = await read_body(request)
    settings: Settings = request.app.state.settings
    try:
        resp = await run_in_threadpool(quiz.append_response, settings.quiz_csv, data)
    except StorageError:
        return PlainTextResponse("Something went wrong saving your response. Please try again.",
                                 status_code=500)

    stage = quiz.score(resp.recent_changes)
    return templates.TemplateResponse(
        request,
        "quiz_result.html",
        {
            "stage_label": resp.stage,
            "details": quiz.stage_details(stage),
            "activities": quiz.ACTIVITIES,
        },
    )


@router.get("/api/messages")
def list_messages(request: Request):
    store: MessageStore = request.app.state.store
    return store.load_all()


@router.post("/api/messages")
async def create_message(request: Request):
    data = await read_body(request)
    store: MessageStore = request.app.state.store
    try:
        msg = await run_in_threadpool(store.append, data.get("author"), data.get("message"))
    except ValidationError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except StorageError as e:
        log.error("Error saving message: %s", e.__cause__ or e)
        return JSONResponse({"error": "Failed to save message"}, status_code=500)
    return JSONResponse({"success": True, "message": msg.to_json()}, status_code=201)


@router.get("/api/health")
def health(request: Request):
    """Liveness check for deployments, added alongside the site endpoints; reports the viewer count."""
    return {"status": "ok", "activeUsers": request.app.state.presence.active}


@router.websocket("/")
@router.websocket("/ws")
async def live_count(websocket: WebSocket):
    presence: Presence = websocket.app.state.presence
    await presence.connect(websocket)
    try:
        while True:
            # clients only listen; drain text or binary frames until they leave
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    finally:
        await presence.disconnect(websocket)


def create_app(settings: Settings | None = None, mailer: Mailer | None = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="Caregiver Site")
    app.state.settings = settings
    app.state.store = MessageStore(settings.messages_json, settings.messages_csv)
    app.state.mailer = mailer or Mailer(settings)
    app.state.presence = Presence()

    app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if request.url.path.startswith("/api/"):
            return JSONResponse({"error": "not found" if exc.status_code == 404 else str(exc.detail),
                                 "path": request.url.path}, status_code=exc.status_code)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.public_dir.mkdir(parents=True, exist_ok=True)
    # mounted last so the routes above take precedence over static paths
    app.mount("/", StaticFiles(directory=str(settings.public_dir), html=True), name="public")

    log.info("Serving %s, data in %s", settings.public_dir.resolve(), settings.data_dir.resolve())
    return app


app = create_app()
