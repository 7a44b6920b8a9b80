# main.py
# ------------------------------------------------------------------------------------
#  FastAPI service for VeoMaker:
#  - POST /api/preflight        -> heuristic prompt check (no provider call)
#  - POST /api/generate         -> enqueue a render (Gemini Veo text→video)
#  - GET  /api/job-status/{id}  -> poll status (queued|processing|done|failed)
#  - GET  /files/{name}         -> serve local renders (STORAGE_PROVIDER=local)
#  - GET  /api/health           -> liveness (no auth)
#  Jobs live in memory for the life of the process.
# ------------------------------------------------------------------------------------

import logging
import re
import secrets
import time
import uuid
from typing import Optional

import httpx
from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import BaseModel

import errors
from generation import GenerationOrchestrator
from job_store import JobStore, PreflightRecord
from notifier import Notifier
from preflight import advise
from settings import Settings, settings as default_settings
from storage import LocalStorage, build_storage
from veo_client import VeoClient

logger = logging.getLogger(__name__)

_BEARER = re.compile(r"^Bearer\s+", re.IGNORECASE)


# ---------- Schemas ----------
# Every field is optional so a missing prompt becomes our 400, not a 422.
class PreflightRequest(BaseModel):
    prompt: Optional[str] = None
    aspectRatio: str = "9:16"
    resolution: str = "720p"
    quality: str = "fast"


class GenerateRequest(BaseModel):
    prompt: Optional[str] = None
    aspectRatio: str = "9:16"
    resolution: str = "720p"
    generateAudio: bool = True
    quality: str = "fast"
    preflightId: Optional[str] = None
    callbackUrl: Optional[str] = None


class GenerateResponse(BaseModel):
    jobId: str
    status: str = "queued"


# ---------- Auth ----------
def check_token(authorization: str, expected: str):
    if not expected:
        return
    token = _BEARER.sub("", authorization or "").strip()
    if not secrets.compare_digest(token.encode(), expected.encode()):
        raise errors.AuthError("Unauthorized (invalid token)")


def require_token(request: Request):
    try:
        check_token(request.headers.get("authorization", ""), request.app.state.settings.backend_public_token)
    except errors.AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))


def create_app(settings: Optional[Settings] = None, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    """
    Wire the service. `transport` is handed to every outbound httpx client
    (provider, asset download, callbacks); tests pass an httpx.MockTransport.
    """
    settings = settings or default_settings

    store = JobStore()
    storage = build_storage(settings)
    notifier = Notifier(settings.callback_url, timeout=settings.callback_timeout_seconds, transport=transport)
    provider = None if settings.simulation_mode else VeoClient.from_settings(settings, transport=transport)
    orchestrator = GenerationOrchestrator(store, storage, notifier, provider)

    if not settings.backend_public_token:
        logger.warning("BACKEND_PUBLIC_TOKEN not set; API is open to any caller")
    if provider is None:
        logger.warning("GEMINI_API_KEY not set; generate requests run in simulation mode")

    app = FastAPI(title="VeoMaker API", version="0.3.0")
    app.state.settings = settings
    app.state.store = store
    app.state.storage = storage
    app.state.orchestrator = orchestrator

    # 🔴 In prod, tighten this list to your domains
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health ----------
    @app.get("/api/health")
    def health():
        return {"ok": True, "now": int(time.time() * 1000), "env": {"storageProvider": storage.name}}

    @app.get("/")
    def index():
        return {"service": "veomaker-api", "storage": storage.name}

    # ---------- Preflight ----------
    @app.post("/api/preflight", dependencies=[Depends(require_token)])
    def preflight(payload: Optional[PreflightRequest] = None):
        if payload is None or not (payload.prompt or "").strip():
            raise HTTPException(status_code=400, detail="prompt is required")
        try:
            advisory = advise(payload.prompt, payload.aspectRatio, payload.resolution, payload.quality)
            record = PreflightRecord(id=str(uuid.uuid4()), data=advisory.model_dump())
            store.create(record)
        except Exception as e:
            logger.exception("preflight error")
            raise HTTPException(status_code=500, detail=f"preflight failed: {e}")
        return {"preflightId": record.id, **advisory.model_dump()}

    # ---------- Generate ----------
    @app.post("/api/generate", response_model=GenerateResponse, dependencies=[Depends(require_token)])
    def generate(background: BackgroundTasks, payload: Optional[GenerateRequest] = None):
        payload = payload or GenerateRequest()
        try:
            job = orchestrator.admit(
                payload.prompt,
                aspect_ratio=payload.aspectRatio,
                resolution=payload.resolution,
                generate_audio=payload.generateAudio,
                quality=payload.quality,
                preflight_id=payload.preflightId,
            )
        except errors.ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.exception("generate endpoint error")
            raise HTTPException(status_code=500, detail=f"generate failed: {e}")

        # 🔴 Background worker does the heavy lifting, after the response is sent
        background.add_task(orchestrator.process, job.id, payload.callbackUrl)
        return GenerateResponse(jobId=job.id, status=job.status.value)

    # ---------- Status ----------
    @app.get("/api/job-status/{job_id}", dependencies=[Depends(require_token)])
    def job_status(job_id: str):
        record = store.get(job_id)
        if record is None:
            raise HTTPException(status_code=404, detail="job not found")
        return record.model_dump(by_alias=True, mode="json")

    # ---------- Local files ----------
    @app.get("/files/{filename}")
    def serve_file(filename: str):
        if not isinstance(storage, LocalStorage):
            raise HTTPException(status_code=404, detail="not available")
        try:
            path = storage.existing_path(filename)
        except errors.NotFound:
            raise HTTPException(status_code=404, detail="file not found")
        return FileResponse(path)

    return app


app = create_app()
