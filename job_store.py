# job_store.py
import time, threading
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _now_ms() -> int:
    return int(time.time() * 1000)


class JobStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.FAILED)


# Position in the lifecycle; done and failed are both final.
_RANK = {
    JobStatus.QUEUED: 0,
    JobStatus.PROCESSING: 1,
    JobStatus.DONE: 2,
    JobStatus.FAILED: 2,
}


class _Record(BaseModel):
    # Serialized with camelCase keys (aspectRatio, createdAt, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Job(_Record):
    id: str
    status: JobStatus = JobStatus.QUEUED
    prompt: str
    aspect_ratio: str = "9:16"
    resolution: str = "720p"
    generate_audio: bool = True
    quality: str = "fast"
    preflight_id: Optional[str] = None
    created_at: int = Field(default_factory=_now_ms)
    progress: int = 0
    result: Optional[Dict[str, Any]] = None
    error: Optional[Any] = None


class PreflightRecord(_Record):
    id: str
    type: str = "preflight"
    created_at: int = Field(default_factory=_now_ms)
    data: Dict[str, Any]


Record = Union[Job, PreflightRecord]


class InvalidTransition(ValueError):
    pass


class JobStore:
    """
    Process-lifetime map of record id -> Job or PreflightRecord.

    Records are never deleted. `update` only accepts forward moves:
    status follows queued -> processing -> done|failed, progress never
    decreases, and a failed job may only carry a `debug` result.
    """

    def __init__(self):
        self._records: Dict[str, Record] = {}
        self._lock = threading.Lock()

    def create(self, record: Record):
        with self._lock:
            if record.id in self._records:
                raise InvalidTransition(f"record {record.id} already exists")
            self._records[record.id] = record

    def get(self, record_id: str) -> Optional[Record]:
        with self._lock:
            return self._records.get(record_id)

    def get_job(self, job_id: str) -> Optional[Job]:
        record = self.get(job_id)
        return record if isinstance(record, Job) else None

    def update(self, job_id: str, **kwargs) -> Optional[Job]:
        with self._lock:
            job = self._records.get(job_id)
            if not isinstance(job, Job):
                return None
            _check(job, kwargs)
            for k, v in kwargs.items():
                setattr(job, k, v)
            return job

    def __len__(self) -> int:
        return len(self._records)


def _check(job: Job, changes: Dict[str, Any]):
    if "status" in changes:
        new = JobStatus(changes["status"])
        changes["status"] = new
        if job.status.terminal and new != job.status:
            raise InvalidTransition(f"job {job.id} is already {job.status.value}")
        if _RANK[new] < _RANK[job.status]:
            raise InvalidTransition(f"job {job.id}: {job.status.value} -> {new.value}")

    if "progress" in changes:
        progress = int(changes["progress"])
        if not 0 <= progress <= 100:
            raise InvalidTransition(f"job {job.id}: progress {progress} out of range")
        if progress < job.progress:
            raise InvalidTransition(f"job {job.id}: progress {job.progress} -> {progress}")

    status = changes.get("status", job.status)
    if changes.get("progress") == 100 and not status.terminal:
        raise InvalidTransition(f"job {job.id}: progress 100 before a terminal state")

    result = changes.get("result", job.result)
    error = changes.get("error", job.error)
    if result is not None and error is not None and set(result) != {"debug"}:
        raise InvalidTransition(f"job {job.id}: result and error are exclusive")
    if result is not None and "url" in result and status != JobStatus.DONE:
        raise InvalidTransition(f"job {job.id}: video result on a {status.value} job")
