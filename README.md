# cirbinius

Data models and helpers for a circuit-compilation toolchain. These are
hash-sealed proof artifacts and reports, an in-memory store for projects and
jobs, and small pieces for a job API: configuration, JSON responses, rate
limiting, telemetry and identifiers. It uses only the standard library.

## Modules

- `cirbinius.artifacts` holds sealed artifact records: `ProvePrecheckBundle`,
  `ProofArtifact`, `ProofBundle` and `BackendCapabilitiesManifest`. It also
  holds their parts: `ProvePrecheckHashes`, `ProvePrecheckReportSummary`,
  `PerConstraintProof`, `WireValueEntry`, `BackendCapabilityFlags` and
  `BuildMetadata`.
  - Each sealed record has `seal_hash()`, which sets its hash field. The hash
    is the SHA-256 of its other fields as compact JSON, in declaration order.
  - Each sealed record has `validate_hash()`, which checks the hash and the
    schema version.
  - Each sealed record has `to_dict()` and `from_dict()`. `from_dict()` raises
    `ValueError` on a missing field.
  - `sha256_prefixed(data)` returns `"sha256:<hex>"`.
- `cirbinius.reports` holds `LoweringReport` and `OptimizationReport`, built
  with `create(...)`, along with `LoweringGateEntry`, `PatternDetectionEntry`
  and `OptimizationStats`. They are sealed the same way. `gate_counts` is kept
  sorted by key.
- `cirbinius.state` holds `Store`, a thread-safe in-memory store.
  - It keeps `Project`, `Upload`, `Job`, `Artifact`, `JobLog` and `ApiKey`
    records.
  - It offers create/list/get/update/delete operations and
    `update_job_status`, which stamps `started_at` and `completed_at`.
  - It offers `get_stats()`.
  - `save_snapshot(path)` and `Store.load_snapshot(path)` write and read JSON
    snapshots. `load_snapshot` returns `None` if the file is missing or
    unreadable.
  - Lists come back newest first. Reads return copies.
  - `now_iso()` and `days_to_date()` produce UTC timestamps.
- `cirbinius.config` holds `Config`. `Config.from_env(environ=None)` reads the
  `CIRBINIUS_*` variables: `CIRBINIUS_HOST`, `CIRBINIUS_PORT`,
  `CIRBINIUS_UPLOAD_DIR`, `CIRBINIUS_ARTIFACT_DIR`, `CIRBINIUS_WORKER_COUNT`,
  `CIRBINIUS_MAX_UPLOAD_SIZE_BYTES`, `CIRBINIUS_ALLOWED_UPLOAD_EXTENSIONS`,
  `CIRBINIUS_SANDBOX_TIMEOUT_SECS`, `CIRBINIUS_LOG_LEVEL` and others.
  Unparseable numbers fall back to the defaults. `addr()` returns
  `(host, port)` and raises `ValueError` if the host is not an IP address.
- `cirbinius.responses` holds `Response` (status, headers, body; `json()`
  decodes the body), `json_response(value, status=200)`,
  `error_response(status, message)` and `to_json_bytes(value)`.
- `cirbinius.ratelimit` holds `RateLimiter(max_per_minute, max_per_hour)`.
  `check(key)` records a request and raises `RateLimitExceeded` when a window
  is full.
- `cirbinius.telemetry` holds `init_telemetry()`, `startup_msg()`,
  `record_request()`, `request_count()` and `TimingScope`. `TimingScope` is a
  context manager that writes to stderr when a block takes over 100 ms.
- `cirbinius.ids` holds `new_id()`, `parse_id(text)` and `short_id(value)`.
  `parse_id` takes 32 hex digits, with or without hyphens, and raises
  `ValueError` otherwise.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

```python
from cirbinius.artifacts import ProofBundle, sha256_prefixed

bundle = ProofBundle.new_precheck_only(
    "build/prove_precheck_report.json",
    sha256_prefixed(b"precheck"),
    None,
    None,
)
assert bundle.validate_hash()
restored = ProofBundle.from_dict(bundle.to_dict())
assert restored.bundle_hash == bundle.bundle_hash
```

```python
from cirbinius.state import Store

store = Store()
project = store.create_project("demo", "first project")
job = store.create_job(project.id, "compile", {"r1cs_upload_id": None})
store.update_job_status(job.id, "running")
store.update_job_status(job.id, "succeeded", result={"message": "ok"}, progress_pct=100)
print(store.get_stats()["jobs_by_status"])   # {'succeeded': 1}
store.save_snapshot("state.json")
```

```python
from cirbinius.ratelimit import RateLimiter, RateLimitExceeded

limiter = RateLimiter(max_per_minute=2, max_per_hour=100)
limiter.check("10.0.0.1")
limiter.check("10.0.0.1")
try:
    limiter.check("10.0.0.1")
except RateLimitExceeded as exc:
    print(exc)   # rate limit exceeded: per minute
```

## What it does not do

The package has no command-line tool and no HTTP server. Nothing listens on
the address that `Config.addr()` returns, routes requests or runs queued jobs.
`Store` only records jobs.

The package does not read R1CS files. It does not build or lower circuit
documents and does not generate or check proofs. It defines, seals and
validates the records that such steps produce.

It runs no external programs. Storage is in memory, with JSON snapshots
written only when `save_snapshot` is called.