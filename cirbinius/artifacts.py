"""Hash-sealed proof artifacts, bundles and backend capability manifests."""

from __future__ import annotations

import dataclasses
import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, TypeVar

TOOLCHAIN_VERSION = "0.1.0"

CBIR_SCHEMA_VERSION = "cbir/v1"
PROVE_PRECHECK_BUNDLE_SCHEMA_VERSION = "prove-precheck-bundle/v1"
PROOF_BUNDLE_SCHEMA_VERSION = "proof-bundle/v1"
BACKEND_CAPABILITIES_SCHEMA_VERSION = "backend-capabilities/v1"
LOWERING_REPORT_SCHEMA_VERSION = "lowering-report/v1"
OPTIMIZATION_REPORT_SCHEMA_VERSION = "optimization-report/v1"
PROOF_ARTIFACT_SCHEMA_VERSION = "proof-artifact/v1"

_T = TypeVar("_T")


def sha256_prefixed(data: bytes) -> str:
    """Return the SHA-256 digest of data as "sha256:<hex>"."""
    return "sha256:" + hashlib.sha256(data).hexdigest()


def canonical_json(value: Any) -> bytes:
    """Serialize value as compact JSON with keys in their given order."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def hash_without(record: Any, hash_field: str) -> str:
    """Hash a dataclass record's fields in order, leaving out its own hash field."""
    view = {k: v for k, v in dataclasses.asdict(record).items() if k != hash_field}
    return sha256_prefixed(canonical_json(view))


def build_record(
    cls: type[_T],
    data: Any,
    converters: Optional[Mapping[str, Callable[[Any], Any]]] = None,
) -> _T:
    """Construct a dataclass from a mapping; fields defaulting to None may be absent."""
    if not isinstance(data, Mapping):
        raise ValueError(f"{cls.__name__}: expected an object")
    converters = converters or {}
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if f.name not in data:
            if f.default is None:
                kwargs[f.name] = None
                continue
            raise ValueError(f"{cls.__name__}: missing field {f.name!r}")
        value = data[f.name]
        convert = converters.get(f.name)
        kwargs[f.name] = convert(value) if convert is not None and value is not None else value
    return cls(**kwargs)


def _list_of(cls: Any) -> Callable[[Any], list]:
    def convert(items: Any) -> list:
        if not isinstance(items, list):
            raise ValueError(f"{cls.__name__}: expected a list")
        return [cls.from_dict(item) for item in items]

    return convert


@dataclass(kw_only=True)
class BuildMetadata:
    schema_version: str
    toolchain_version: str
    content_hash: str

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuildMetadata":
        return build_record(cls, data)


@dataclass(kw_only=True)
class ProvePrecheckHashes:
    circuit_hash: str
    witness_hash: str
    wasm_hash: str
    input_hash: str
    binius_witness_hash: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProvePrecheckHashes":
        return build_record(cls, data)


@dataclass(kw_only=True)
class ProvePrecheckReportSummary:
    precheck_passed: bool
    generated_witness_path: str
    generated_witness_len: int
    r1cs_wire_count: int
    witness_equivalent: Optional[bool] = None
    value_mismatch_count: int
    constraint_failure_count: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProvePrecheckReportSummary":
        return build_record(cls, data)


@dataclass(kw_only=True)
class ProvePrecheckBundle:
    schema_version: str = PROVE_PRECHECK_BUNDLE_SCHEMA_VERSION
    toolchain_version: str = TOOLCHAIN_VERSION
    bundle_hash: str = ""
    hashes: ProvePrecheckHashes
    report: ProvePrecheckReportSummary

    @classmethod
    def create(
        cls, hashes: ProvePrecheckHashes, report: ProvePrecheckReportSummary
    ) -> "ProvePrecheckBundle":
        """Build a bundle for the current toolchain with its hash sealed."""
        bundle = cls(hashes=hashes, report=report)
        bundle.seal_hash()
        return bundle

    def seal_hash(self) -> None:
        self.bundle_hash = hash_without(self, "bundle_hash")

    def validate_hash(self) -> bool:
        return (
            self.bundle_hash == hash_without(self, "bundle_hash")
            and self.schema_version == PROVE_PRECHECK_BUNDLE_SCHEMA_VERSION
        )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProvePrecheckBundle":
        return build_record(
            cls,
            data,
            {
                "hashes": ProvePrecheckHashes.from_dict,
                "report": ProvePrecheckReportSummary.from_dict,
            },
        )


@dataclass(kw_only=True)
class WireValueEntry:
    wire_id: int
    value_hex: str
    merkle_siblings: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WireValueEntry":
        return build_record(cls, data, {"merkle_siblings": list})


@dataclass(kw_only=True)
class PerConstraintProof:
    constraint_id: int
    wire_values: list[WireValueEntry] = field(default_factory=list)
    a_eval_hex: str
    b_eval_hex: str
    c_eval_hex: str
    resolved: bool

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PerConstraintProof":
        return build_record(cls, data, {"wire_values": _list_of(WireValueEntry)})


@dataclass(kw_only=True)
class ProofArtifact:
    schema_version: str = PROOF_ARTIFACT_SCHEMA_VERSION
    toolchain_version: str = TOOLCHAIN_VERSION
    proof_hash: str = ""
    source_cbir_hash: str
    merkle_root: str
    num_constraints: int
    num_wires: int
    public_input_count: int
    public_output_count: int
    constraint_proofs: list[PerConstraintProof] = field(default_factory=list)
    public_inputs_hash: Optional[str] = None
    verifier_key_fingerprint: Optional[str] = None

    def seal_hash(self) -> None:
        self.proof_hash = hash_without(self, "proof_hash")

    def validate_hash(self) -> bool:
        return (
            self.proof_hash == hash_without(self, "proof_hash")
            and self.schema_version == PROOF_ARTIFACT_SCHEMA_VERSION
        )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProofArtifact":
        return build_record(cls, data, {"constraint_proofs": _list_of(PerConstraintProof)})


@dataclass(kw_only=True)
class ProofBundle:
    schema_version: str = PROOF_BUNDLE_SCHEMA_VERSION
    toolchain_version: str = TOOLCHAIN_VERSION
    bundle_hash: str = ""
    backend: str = "binius64"
    status: str
    proof_generated: bool
    precheck_bundle_path: str
    precheck_bundle_hash: str
    backend_capabilities_manifest_path: Optional[str] = None
    backend_capabilities_manifest_hash: Optional[str] = None
    proof_hash: Optional[str] = None
    proof_artifact_path: Optional[str] = None
    public_inputs_hash: Optional[str] = None
    verifier_key_fingerprint: Optional[str] = None
    notes: list[str] = field(default_factory=list)

    @classmethod
    def new_precheck_only(
        cls,
        precheck_bundle_path: str,
        precheck_bundle_hash: str,
        backend_capabilities_manifest_path: Optional[str] = None,
        backend_capabilities_manifest_hash: Optional[str] = None,
    ) -> "ProofBundle":
        """Build a sealed bundle that carries only precheck results."""
        bundle = cls(
            status="precheck-only",
            proof_generated=False,
            precheck_bundle_path=precheck_bundle_path,
            precheck_bundle_hash=precheck_bundle_hash,
            backend_capabilities_manifest_path=backend_capabilities_manifest_path,
            backend_capabilities_manifest_hash=backend_capabilities_manifest_hash,
            notes=[
                "Proof generation backend integration pending.",
                "Bundle is valid for precheck and artifact integrity verification.",
            ],
        )
        bundle.seal_hash()
        return bundle

    @classmethod
    def new_with_proof(
        cls,
        precheck_bundle_path: str,
        precheck_bundle_hash: str,
        proof_artifact_path: str,
        proof_hash: str,
        public_inputs_hash: Optional[str] = None,
        verifier_key_fingerprint: Optional[str] = None,
        backend_capabilities_manifest_path: Optional[str] = None,
        backend_capabilities_manifest_hash: Optional[str] = None,
    ) -> "ProofBundle":
        """Build a sealed bundle that references a generated proof."""
        bundle = cls(
            status="proof-generated",
            proof_generated=True,
            precheck_bundle_path=precheck_bundle_path,
            precheck_bundle_hash=precheck_bundle_hash,
            backend_capabilities_manifest_path=backend_capabilities_manifest_path,
            backend_capabilities_manifest_hash=backend_capabilities_manifest_hash,
            proof_hash=proof_hash,
            proof_artifact_path=proof_artifact_path,
            public_inputs_hash=public_inputs_hash,
            verifier_key_fingerprint=verifier_key_fingerprint,
            notes=["Proof generated via Merkle-based constraint satisfaction."],
        )
        bundle.seal_hash()
        return bundle

    def seal_hash(self) -> None:
        self.bundle_hash = hash_without(self, "bundle_hash")

    def validate_hash(self) -> bool:
        return (
            self.bundle_hash == hash_without(self, "bundle_hash")
            and self.schema_version == PROOF_BUNDLE_SCHEMA_VERSION
        )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProofBundle":
        return build_record(cls, data, {"notes": list})


@dataclass(kw_only=True)
class BackendCapabilityFlags:
    precheck_only_supported: bool
    proof_generation_supported: bool
    verify_supported: bool
    proof_hash_supported: bool
    public_inputs_hash_supported: bool
    verifier_key_fingerprint_supported: bool

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BackendCapabilityFlags":
        return build_record(cls, data)


@dataclass(kw_only=True)
class BackendCapabilitiesManifest:
    schema_version: str = BACKEND_CAPABILITIES_SCHEMA_VERSION
    toolchain_version: str = TOOLCHAIN_VERSION
    manifest_hash: str = ""
    backend: str = "binius64"
    capabilities: BackendCapabilityFlags
    notes: list[str] = field(default_factory=list)

    @classmethod
    def new_precheck_only(cls) -> "BackendCapabilitiesManifest":
        """Build the sealed capability profile of the built-in backend."""
        manifest = cls(
            capabilities=BackendCapabilityFlags(
                precheck_only_supported=True,
                proof_generation_supported=True,
                verify_supported=True,
                proof_hash_supported=True,
                public_inputs_hash_supported=True,
                verifier_key_fingerprint_supported=False,
            ),
            notes=[
                "Precheck-only capability profile.",
                "Enable proof_generation_supported only when real backend proving is integrated.",
            ],
        )
        manifest.seal_hash()
        return manifest

    def seal_hash(self) -> None:
        self.manifest_hash = hash_without(self, "manifest_hash")

    def validate_hash(self) -> bool:
        return (
            self.manifest_hash == hash_without(self, "manifest_hash")
            and self.schema_version == BACKEND_CAPABILITIES_SCHEMA_VERSION
        )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BackendCapabilitiesManifest":
        return build_record(
            cls,
            data,
            {"capabilities": BackendCapabilityFlags.from_dict, "notes": list},
        )