# generation.py
# ------------------------------------------------------------------------------------
#  Job lifecycle for a text->video request:
#    admit()   -> validate, store a queued Job, hand back its id (no network)
#    process() -> background: processing -> provider -> resolver -> storage
#                 -> done|failed -> callback
#  process() owns the job record it was given; nothing else writes to it.
# ------------------------------------------------------------------------------------
import json
import logging
import uuid
from typing import Any, Optional

from errors import ProviderCallError, UnrecognizedResponseShape, ValidationError
from job_store import Job, JobStatus, JobStore
from notifier import Notifier
from response_resolver import InlineVideo, RemoteVideo, resolve
from storage import StorageBackend
from veo_client import VeoClient

logger = logging.getLogger(__name__)

SIMULATION_INFO = "SIMULATED_RESULT - configure GEMINI_API_KEY for real output"

# Coarse progress checkpoints
PROGRESS_STARTED = 5
PROGRESS_REQUESTED = 10
PROGRESS_RESPONDED = 40
PROGRESS_FINISHED = 100


def _video_name(job_id: str) -> str:
    return f"veo-{job_id}.mp4"


def _debug_name(job_id: str) -> str:
    return f"debug-{job_id}.json"


def _sim_name(job_id: str) -> str:
    return f"sim-{job_id}.txt"


class GenerationOrchestrator:
    def __init__(
        self,
        store: JobStore,
        storage: StorageBackend,
        notifier: Notifier,
        provider: Optional[VeoClient] = None,
    ):
        self.store = store
        self.storage = storage
        self.notifier = notifier
        # No provider means simulation mode
        self.provider = provider

    @property
    def simulated(self) -> bool:
        return self.provider is None

    def admit(
        self,
        prompt: Optional[str],
        *,
        aspect_ratio: str = "9:16",
        resolution: str = "720p",
        generate_audio: bool = True,
        quality: str = "fast",
        preflight_id: Optional[str] = None,
    ) -> Job:
        if not prompt or not prompt.strip():
            raise ValidationError("prompt is required")

        job = Job(
            id=str(uuid.uuid4()),
            prompt=prompt,
            aspect_ratio=aspect_ratio,
            resolution=resolution,
            generate_audio=generate_audio,
            quality=quality,
            preflight_id=preflight_id,
        )
        self.store.create(job)
        logger.info("job %s queued (quality=%s, resolution=%s)", job.id, quality, resolution)
        return job

    async def process(self, job_id: str, callback_url: Optional[str] = None):
        """Background worker: drive one admitted job to a terminal state."""
        job = self.store.get_job(job_id)
        if job is None:
            logger.warning("process called for unknown job %s", job_id)
            return

        self.store.update(job_id, status=JobStatus.PROCESSING, progress=PROGRESS_STARTED)
        try:
            if self.simulated:
                await self._simulate(job)
            else:
                await self._generate(job)
        except UnrecognizedResponseShape as e:
            await self._keep_debug(job_id, e)
        except ProviderCallError as e:
            logger.error("job %s provider error: %s", job_id, e)
            self._fail(job_id, e.detail)
        except Exception as e:
            logger.exception("job %s processing error", job_id)
            self._fail(job_id, str(e))

        await self.notifier.notify(self.store.get_job(job_id), callback_url)

    def _fail(self, job_id: str, error: Any):
        self.store.update(job_id, status=JobStatus.FAILED, progress=PROGRESS_FINISHED, error=error)

    def _done(self, job_id: str, result: dict):
        self.store.update(job_id, status=JobStatus.DONE, progress=PROGRESS_FINISHED, result=result)
        logger.info("job %s done: %s", job_id, result.get("url"))

    async def _simulate(self, job: Job):
        text = f"Simulated video for prompt: {job.prompt}\n(You must configure GEMINI_API_KEY for real generation)"
        url = await self.storage.put(text.encode("utf-8"), _sim_name(job.id), "text/plain")
        self._done(job.id, {"url": url, "info": SIMULATION_INFO})

    async def _generate(self, job: Job):
        self.store.update(job.id, progress=PROGRESS_REQUESTED)
        body = await self.provider.generate_video(
            job.prompt,
            job.aspect_ratio,
            job.resolution,
            job.generate_audio,
            job.quality,
        )
        self.store.update(job.id, progress=PROGRESS_RESPONDED)

        found = resolve(body)
        if isinstance(found, RemoteVideo):
            data = await self.provider.download(found.url)
            url = await self.storage.put(data, _video_name(job.id), "video/mp4")
            self._done(job.id, {"url": url, "providerVideoUrl": found.url})
        elif isinstance(found, InlineVideo):
            url = await self.storage.put(found.decode(), _video_name(job.id), "video/mp4")
            self._done(job.id, {"url": url})
        else:
            raise UnrecognizedResponseShape(found.body)

    async def _keep_debug(self, job_id: str, shape: UnrecognizedResponseShape):
        """Failed job, but the raw reply is kept as a debug artifact."""
        raw = shape.body if shape.body not in (None, "") else {"empty": True}
        try:
            debug_url = await self.storage.put(
                json.dumps(raw, indent=2).encode("utf-8"),
                _debug_name(job_id),
                "application/json",
            )
        except Exception as e:
            logger.exception("job %s: could not save debug file", job_id)
            self._fail(job_id, f"{shape} (debug file not saved: {e})")
            return
        logger.error("job %s: unrecognized provider response, saved to %s", job_id, debug_url)
        self.store.update(
            job_id,
            status=JobStatus.FAILED,
            progress=PROGRESS_FINISHED,
            result={"debug": debug_url},
            error=str(shape),
        )
