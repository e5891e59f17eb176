"""In-memory store of projects, uploads, jobs, artifacts, logs and API keys."""

from __future__ import annotations

import copy
import dataclasses
import json
import threading
import time
import uuid
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, TypeVar

from .ids import new_id

_TERMINAL_STATUSES = frozenset({"succeeded", "failed", "cancelled"})
_UUID_FIELDS = ("id", "project_id", "job_id")


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def days_to_date(days: int) -> tuple[int, int, int]:
    """Convert days since 1970-01-01 into a (year, month, day) civil date."""
    days += 719468
    era = days if days >= 0 else days - 146096
    era_days = era % 146097
    year_era = (era_days - era_days // 1460 + era_days // 36524 - era_days // 146096) // 365
    year = year_era + _trunc_div(era, 146097) * 400
    doy = era_days - (365 * year_era + year_era // 4 - year_era // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    if month <= 2:
        year += 1
    if year <= 0:
        year -= 1
    return year, month, day


def now_iso() -> str:
    """Return the current UTC time as YYYY-MM-DDTHH:MM:SS.nnnnnnnnnZ."""
    total_ns = time.time_ns()
    secs, nanos = divmod(total_ns, 1_000_000_000)
    days, time_secs = divmod(secs, 86400)
    hours, rest = divmod(time_secs, 3600)
    minutes, seconds = divmod(rest, 60)
    year, month, day = days_to_date(days)
    return (
        f"{year:04}-{month:02}-{day:02}T{hours:02}:{minutes:02}:{seconds:02}.{nanos:09}Z"
    )


@dataclass
class Project:
    id: uuid.UUID
    name: str
    description: Optional[str]
    status: str
    created_at: str
    updated_at: str


@dataclass
class Upload:
    id: uuid.UUID
    project_id: uuid.UUID
    filename: str
    file_size: int
    content_type: str
    storage_path: str
    file_hash: str
    created_at: str


@dataclass
class Job:
    id: uuid.UUID
    project_id: uuid.UUID
    job_type: str
    status: str
    params: Any
    result: Any = None
    error_message: Optional[str] = None
    progress_pct: Optional[int] = None
    created_at: str = ""
    started_at: Optional[str] = None
    completed_at: Optional[str] = None


@dataclass
class Artifact:
    id: uuid.UUID
    job_id: uuid.UUID
    artifact_type: str
    filename: str
    file_size: int
    storage_path: str
    content_hash: str
    created_at: str


@dataclass
class JobLog:
    id: uuid.UUID
    job_id: uuid.UUID
    level: str
    message: str
    created_at: str


@dataclass
class ApiKey:
    id: uuid.UUID
    key_prefix: str
    key_hash: str
    name: str
    project_id: Optional[uuid.UUID]
    permissions: list[str] = field(default_factory=list)
    expires_at: Optional[str] = None
    created_at: str = ""


_R = TypeVar("_R")


def _record_to_dict(record: Any) -> dict[str, Any]:
    data = dataclasses.asdict(record)
    for key in _UUID_FIELDS:
        if data.get(key) is not None:
            data[key] = str(data[key])
    return data


def _record_from_dict(cls: type[_R], data: dict[str, Any]) -> _R:
    kwargs = dict(data)
    for key in _UUID_FIELDS:
        if kwargs.get(key) is not None:
            kwargs[key] = uuid.UUID(kwargs[key])
    return cls(**kwargs)


def _newest_first(items: list[_R]) -> list[_R]:
    return sorted(items, key=lambda item: item.created_at, reverse=True)


class Store:
    """Thread-safe record store; every read returns copies."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._projects: dict[uuid.UUID, Project] = {}
        self._uploads: dict[uuid.UUID, Upload] = {}
        self._uploads_by_project: defaultdict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
        self._jobs: dict[uuid.UUID, Job] = {}
        self._jobs_by_project: defaultdict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
        self._artifacts: dict[uuid.UUID, Artifact] = {}
        self._artifacts_by_job: defaultdict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
        self._job_logs: defaultdict[uuid.UUID, list[JobLog]] = defaultdict(list)
        self._api_keys: dict[str, ApiKey] = {}
        self._api_keys_by_id: dict[uuid.UUID, ApiKey] = {}

    # Snapshots

    def _to_dict(self) -> dict[str, Any]:
        def index(mapping: dict[uuid.UUID, list[uuid.UUID]]) -> dict[str, list[str]]:
            return {str(k): [str(i) for i in v] for k, v in mapping.items()}

        return {
            "projects": [_record_to_dict(p) for p in self._projects.values()],
            "uploads": [_record_to_dict(u) for u in self._uploads.values()],
            "uploads_by_project": index(self._uploads_by_project),
            "jobs": [_record_to_dict(j) for j in self._jobs.values()],
            "jobs_by_project": index(self._jobs_by_project),
            "artifacts": [_record_to_dict(a) for a in self._artifacts.values()],
            "artifacts_by_job": index(self._artifacts_by_job),
            "job_logs": {
                str(k): [_record_to_dict(log) for log in v] for k, v in self._job_logs.items()
            },
            "api_keys": {p: _record_to_dict(k) for p, k in self._api_keys.items()},
            "api_keys_by_id": {str(i): _record_to_dict(k) for i, k in self._api_keys_by_id.items()},
        }

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Store":
        def index(raw: dict[str, list[str]]) -> defaultdict[uuid.UUID, list[uuid.UUID]]:
            result: defaultdict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
            for key, ids in raw.items():
                result[uuid.UUID(key)] = [uuid.UUID(i) for i in ids]
            return result

        store = cls()
        store._projects = {p.id: p for p in (_record_from_dict(Project, d) for d in data["projects"])}
        store._uploads = {u.id: u for u in (_record_from_dict(Upload, d) for d in data["uploads"])}
        store._uploads_by_project = index(data["uploads_by_project"])
        store._jobs = {j.id: j for j in (_record_from_dict(Job, d) for d in data["jobs"])}
        store._jobs_by_project = index(data["jobs_by_project"])
        store._artifacts = {
            a.id: a for a in (_record_from_dict(Artifact, d) for d in data["artifacts"])
        }
        store._artifacts_by_job = index(data["artifacts_by_job"])
        for key, logs in data["job_logs"].items():
            store._job_logs[uuid.UUID(key)] = [_record_from_dict(JobLog, d) for d in logs]
        store._api_keys = {p: _record_from_dict(ApiKey, d) for p, d in data["api_keys"].items()}
        store._api_keys_by_id = {
            uuid.UUID(i): _record_from_dict(ApiKey, d) for i, d in data["api_keys_by_id"].items()
        }
        return store

    def save_snapshot(self, path: str | Path) -> None:
        """Write the whole store to path as JSON."""
        with self._lock:
            text = json.dumps(self._to_dict())
        Path(path).write_text(text, encoding="utf-8")

    @classmethod
    def load_snapshot(cls, path: str | Path) -> Optional["Store"]:
        """Read a store saved by save_snapshot, or None if it is missing or unreadable."""
        try:
            data = json.loads(Path(path).read_bytes())
            return cls._from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError):
            return None

    # Projects

    def create_project(self, name: str, description: Optional[str] = None) -> Project:
        now = now_iso()
        project = Project(
            id=new_id(),
            name=name,
            description=description,
            status="active",
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._projects[project.id] = project
            return copy.deepcopy(project)

    def list_projects(self) -> list[Project]:
        with self._lock:
            return _newest_first(copy.deepcopy(list(self._projects.values())))

    def get_project(self, project_id: uuid.UUID) -> Optional[Project]:
        with self._lock:
            return copy.deepcopy(self._projects.get(project_id))

    def update_project(
        self,
        project_id: uuid.UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Optional[Project]:
        with self._lock:
            project = self._projects.get(project_id)
            if project is None:
                return None
            if name is not None:
                project.name = name
            if description is not None:
                project.description = description
            if status is not None:
                project.status = status
            project.updated_at = now_iso()
            return copy.deepcopy(project)

    def delete_project(self, project_id: uuid.UUID) -> bool:
        with self._lock:
            return self._projects.pop(project_id, None) is not None

    # Uploads

    def create_upload(
        self,
        project_id: uuid.UUID,
        filename: str,
        file_size: int,
        content_type: str,
        storage_path: str,
        file_hash: str,
    ) -> Upload:
        upload = Upload(
            id=new_id(),
            project_id=project_id,
            filename=filename,
            file_size=file_size,
            content_type=content_type,
            storage_path=storage_path,
            file_hash=file_hash,
            created_at=now_iso(),
        )
        with self._lock:
            self._uploads[upload.id] = upload
            self._uploads_by_project[project_id].append(upload.id)
            return copy.deepcopy(upload)

    def list_uploads(self, project_id: uuid.UUID) -> list[Upload]:
        with self._lock:
            ids = self._uploads_by_project.get(project_id, [])
            items = [self._uploads[i] for i in ids if i in self._uploads]
            return _newest_first(copy.deepcopy(items))

    def get_upload(self, upload_id: uuid.UUID) -> Optional[Upload]:
        with self._lock:
            return copy.deepcopy(self._uploads.get(upload_id))

    def delete_upload(self, upload_id: uuid.UUID) -> bool:
        with self._lock:
            upload = self._uploads.pop(upload_id, None)
            if upload is None:
                return False
            ids = self._uploads_by_project.get(upload.project_id)
            if ids is not None:
                ids[:] = [i for i in ids if i != upload_id]
            return True

    # Jobs

    def create_job(self, project_id: uuid.UUID, job_type: str, params: Any) -> Job:
        job = Job(
            id=new_id(),
            project_id=project_id,
            job_type=job_type,
            status="queued",
            params=copy.deepcopy(params),
            created_at=now_iso(),
        )
        with self._lock:
            self._jobs[job.id] = job
            self._jobs_by_project[project_id].append(job.id)
            return copy.deepcopy(job)

    def list_jobs(self, project_id: uuid.UUID) -> list[Job]:
        with self._lock:
            ids = self._jobs_by_project.get(project_id, [])
            items = [self._jobs[i] for i in ids if i in self._jobs]
            return _newest_first(copy.deepcopy(items))

    def get_job(self, job_id: uuid.UUID) -> Optional[Job]:
        with self._lock:
            return copy.deepcopy(self._jobs.get(job_id))

    def update_job_status(
        self,
        job_id: uuid.UUID,
        status: str,
        error_message: Optional[str] = None,
        result: Any = None,
        progress_pct: Optional[int] = None,
    ) -> Optional[Job]:
        """Set a job's status and optional fields, stamping start and completion times."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            job.status = status
            if error_message is not None:
                job.error_message = error_message
            if result is not None:
                job.result = copy.deepcopy(result)
            if progress_pct is not None:
                job.progress_pct = progress_pct
            if status == "running" and job.started_at is None:
                job.started_at = now_iso()
            if status in _TERMINAL_STATUSES:
                job.completed_at = now_iso()
            return copy.deepcopy(job)

    # Artifacts

    def create_artifact(
        self,
        job_id: uuid.UUID,
        artifact_type: str,
        filename: str,
        file_size: int,
        storage_path: str,
        content_hash: str,
    ) -> Artifact:
        artifact = Artifact(
            id=new_id(),
            job_id=job_id,
            artifact_type=artifact_type,
            filename=filename,
            file_size=file_size,
            storage_path=storage_path,
            content_hash=content_hash,
            created_at=now_iso(),
        )
        with self._lock:
            self._artifacts[artifact.id] = artifact
            self._artifacts_by_job[job_id].append(artifact.id)
            return copy.deepcopy(artifact)

    def list_artifacts(self, job_id: uuid.UUID) -> list[Artifact]:
        with self._lock:
            ids = self._artifacts_by_job.get(job_id, [])
            items = [self._artifacts[i] for i in ids if i in self._artifacts]
            return _newest_first(copy.deepcopy(items))

    def get_artifact(self, artifact_id: uuid.UUID) -> Optional[Artifact]:
        with self._lock:
            return copy.deepcopy(self._artifacts.get(artifact_id))

    # Job logs

    def append_job_log(self, job_id: uuid.UUID, level: str, message: str) -> JobLog:
        log = JobLog(id=new_id(), job_id=job_id, level=level, message=message, created_at=now_iso())
        with self._lock:
            self._job_logs[job_id].append(log)
            return copy.deepcopy(log)

    def get_job_logs(self, job_id: uuid.UUID) -> list[JobLog]:
        with self._lock:
            return copy.deepcopy(self._job_logs.get(job_id, []))

    # API keys

    def create_api_key(
        self,
        key_prefix: str,
        key_hash: str,
        name: str,
        project_id: Optional[uuid.UUID] = None,
        permissions: Optional[list[str]] = None,
        expires_at: Optional[str] = None,
    ) -> ApiKey:
        key = ApiKey(
            id=new_id(),
            key_prefix=key_prefix,
            key_hash=key_hash,
            name=name,
            project_id=project_id,
            permissions=list(permissions or []),
            expires_at=expires_at,
            created_at=now_iso(),
        )
        with self._lock:
            self._api_keys[key.key_prefix] = key
            self._api_keys_by_id[key.id] = copy.deepcopy(key)
            return copy.deepcopy(key)

    def get_api_key_by_prefix(self, prefix: str) -> Optional[ApiKey]:
        with self._lock:
            return copy.deepcopy(self._api_keys.get(prefix))

    def list_api_keys(self) -> list[ApiKey]:
        with self._lock:
            return _newest_first(copy.deepcopy(list(self._api_keys.values())))

    def delete_api_key(self, key_id: uuid.UUID) -> bool:
        with self._lock:
            key = self._api_keys_by_id.pop(key_id, None)
            if key is None:
                return False
            self._api_keys.pop(key.key_prefix, None)
            return True

    # Stats

    def get_stats(self) -> dict[str, Any]:
        """Summarise record counts and jobs grouped by status and type."""
        with self._lock:
            jobs = list(self._jobs.values())
            return {
                "total_projects": len(self._projects),
                "total_jobs": len(jobs),
                "total_uploads": len(self._uploads),
                "jobs_by_status": dict(Counter(job.status for job in jobs)),
                "jobs_by_type": dict(Counter(job.job_type for job in jobs)),
            }