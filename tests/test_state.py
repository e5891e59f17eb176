import datetime
import re
import uuid

import pytest

from cirbinius.state import Store, days_to_date, now_iso

ISO_RE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{9}Z")


@pytest.fixture
def store():
    return Store()


def test_days_to_date_epoch():
    assert days_to_date(0) == (1970, 1, 1)


@pytest.mark.parametrize("days", [-1, 1, 59, 60, 365, 10957, 11016, 19723, 30000, -3653])
def test_days_to_date_agrees_with_calendar(days):
    expected = datetime.date(1970, 1, 1) + datetime.timedelta(days=days)
    assert days_to_date(days) == (expected.year, expected.month, expected.day)


def test_now_iso_format_and_date():
    stamp = now_iso()
    assert ISO_RE.fullmatch(stamp)
    today = datetime.datetime.now(datetime.timezone.utc).date()
    parsed = datetime.date.fromisoformat(stamp[:10])
    assert abs((parsed - today).days) <= 1


def test_create_and_get_project(store):
    project = store.create_project("demo", "a circuit")
    assert project.status == "active"
    assert project.created_at == project.updated_at
    fetched = store.get_project(project.id)
    assert fetched == project


def test_get_missing_project_returns_none(store):
    assert store.get_project(uuid.uuid4()) is None


def test_list_projects_newest_first(store):
    for name in ("a", "b", "c"):
        store.create_project(name)
    stamps = [p.created_at for p in store.list_projects()]
    assert len(stamps) == 3
    assert stamps == sorted(stamps, reverse=True)


def test_update_project_partial(store):
    project = store.create_project("demo", None)
    updated = store.update_project(project.id, None, "desc", None)
    assert updated.name == "demo"
    assert updated.description == "desc"
    assert updated.status == "active"
    updated = store.update_project(project.id, "renamed", None, "archived")
    assert (updated.name, updated.description, updated.status) == ("renamed", "desc", "archived")


def test_update_missing_project(store):
    assert store.update_project(uuid.uuid4(), "x", None, None) is None


def test_delete_project(store):
    project = store.create_project("demo")
    assert store.delete_project(project.id) is True
    assert store.delete_project(project.id) is False
    assert store.get_project(project.id) is None


def test_returned_records_are_copies(store):
    project = store.create_project("demo")
    project.name = "changed"
    assert store.get_project(project.id).name == "demo"


def test_uploads_per_project(store):
    p1 = store.create_project("one")
    p2 = store.create_project("two")
    u1 = store.create_upload(p1.id, "c.r1cs", 10, "application/octet-stream", "/x/c.r1cs", "ab")
    store.create_upload(p2.id, "d.sym", 5, "text/plain", "/x/d.sym", "cd")
    listed = store.list_uploads(p1.id)
    assert [u.id for u in listed] == [u1.id]
    assert store.get_upload(u1.id).filename == "c.r1cs"
    assert store.list_uploads(uuid.uuid4()) == []


def test_delete_upload_removes_from_index(store):
    project = store.create_project("one")
    upload = store.create_upload(project.id, "c.r1cs", 1, "t", "/p", "h")
    assert store.delete_upload(upload.id) is True
    assert store.list_uploads(project.id) == []
    assert store.delete_upload(upload.id) is False


def test_job_lifecycle(store):
    project = store.create_project("demo")
    job = store.create_job(project.id, "compile", {"r1cs_upload_id": "x"})
    assert job.status == "queued"
    assert job.started_at is None and job.completed_at is None

    running = store.update_job_status(job.id, "running")
    assert running.started_at is not None
    assert running.completed_at is None

    again = store.update_job_status(job.id, "running")
    assert again.started_at == running.started_at

    done = store.update_job_status(job.id, "succeeded", None, {"message": "ok"}, 100)
    assert done.completed_at is not None
    assert done.result == {"message": "ok"}
    assert done.progress_pct == 100
    assert store.get_job(job.id) == done


def test_failed_job_keeps_error(store):
    project = store.create_project("demo")
    job = store.create_job(project.id, "prove", {})
    failed = store.update_job_status(job.id, "failed", "boom")
    assert failed.error_message == "boom"
    assert failed.completed_at is not None


def test_update_missing_job(store):
    assert store.update_job_status(uuid.uuid4(), "running") is None


def test_list_jobs_by_project(store):
    project = store.create_project("demo")
    other = store.create_project("other")
    a = store.create_job(project.id, "compile", {})
    b = store.create_job(project.id, "verify", {})
    store.create_job(other.id, "analyze", {})
    assert {j.id for j in store.list_jobs(project.id)} == {a.id, b.id}


def test_artifacts(store):
    job_id = uuid.uuid4()
    artifact = store.create_artifact(job_id, "cbir", "out.json", 42, "/a/out.json", "hash")
    assert [a.id for a in store.list_artifacts(job_id)] == [artifact.id]
    assert store.get_artifact(artifact.id).file_size == 42
    assert store.get_artifact(uuid.uuid4()) is None


def test_job_logs_keep_order(store):
    job_id = uuid.uuid4()
    store.append_job_log(job_id, "info", "first")
    store.append_job_log(job_id, "error", "second")
    logs = store.get_job_logs(job_id)
    assert [(log.level, log.message) for log in logs] == [("info", "first"), ("error", "second")]
    assert store.get_job_logs(uuid.uuid4()) == []


def test_api_keys(store):
    key = store.create_api_key("cbx_abcd", "hash", "ci", None, ["read"], None)
    assert store.get_api_key_by_prefix("cbx_abcd").id == key.id
    assert [k.id for k in store.list_api_keys()] == [key.id]
    assert store.delete_api_key(key.id) is True
    assert store.get_api_key_by_prefix("cbx_abcd") is None
    assert store.list_api_keys() == []
    assert store.delete_api_key(key.id) is False


def test_stats(store):
    project = store.create_project("demo")
    store.create_upload(project.id, "c.r1cs", 1, "t", "/p", "h")
    j1 = store.create_job(project.id, "compile", {})
    store.create_job(project.id, "compile", {})
    store.create_job(project.id, "prove", {})
    store.update_job_status(j1.id, "failed", "x")
    stats = store.get_stats()
    assert stats["total_projects"] == 1
    assert stats["total_jobs"] == 3
    assert stats["total_uploads"] == 1
    assert stats["jobs_by_status"] == {"failed": 1, "queued": 2}
    assert stats["jobs_by_type"] == {"compile": 2, "prove": 1}


def test_snapshot_round_trip(store, tmp_path):
    project = store.create_project("demo", "d")
    upload = store.create_upload(project.id, "c.r1cs", 3, "t", "/p", "h")
    job = store.create_job(project.id, "compile", {"nested": [1, 2]})
    store.update_job_status(job.id, "succeeded", None, {"message": "ok"}, 100)
    artifact = store.create_artifact(job.id, "cbir", "f", 1, "/f", "h")
    store.append_job_log(job.id, "info", "hello")
    key = store.create_api_key("pre", "hash", "n", project.id, ["read", "write"], None)

    path = tmp_path / "state.json"
    store.save_snapshot(path)
    loaded = Store.load_snapshot(path)

    assert loaded.get_project(project.id) == store.get_project(project.id)
    assert loaded.list_uploads(project.id) == [store.get_upload(upload.id)]
    assert loaded.get_job(job.id) == store.get_job(job.id)
    assert loaded.list_artifacts(job.id) == [store.get_artifact(artifact.id)]
    assert loaded.get_job_logs(job.id) == store.get_job_logs(job.id)
    assert loaded.get_api_key_by_prefix("pre") == store.get_api_key_by_prefix("pre")
    assert loaded.delete_api_key(key.id) is True
    assert loaded.get_stats() == store.get_stats()


def test_load_snapshot_missing_file(tmp_path):
    assert Store.load_snapshot(tmp_path / "missing.json") is None


def test_load_snapshot_invalid_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    assert Store.load_snapshot(path) is None