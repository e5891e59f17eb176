"""Hash-sealed lowering and optimization reports."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .artifacts import (
    LOWERING_REPORT_SCHEMA_VERSION,
    OPTIMIZATION_REPORT_SCHEMA_VERSION,
    TOOLCHAIN_VERSION,
    build_record,
    canonical_json,
    sha256_prefixed,
)


def _sorted_counts(counts: Mapping[str, int]) -> dict[str, int]:
    return {key: counts[key] for key in sorted(counts)}


def _record_dict(record: Any) -> dict[str, Any]:
    data = dataclasses.asdict(record)
    data["gate_counts"] = _sorted_counts(data["gate_counts"])
    return data


def _sealed_hash(record: Any, hash_field: str) -> str:
    view = {k: v for k, v in _record_dict(record).items() if k != hash_field}
    return sha256_prefixed(canonical_json(view))


def _entries(cls: Any):
    def convert(items: Any) -> list:
        if not isinstance(items, list):
            raise ValueError(f"{cls.__name__}: expected a list")
        return [cls.from_dict(item) for item in items]

    return convert


@dataclass(kw_only=True)
class LoweringGateEntry:
    constraint_id: int
    gate_kind: str
    num_signals: int
    limb_width: Optional[str] = None
    passes: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LoweringGateEntry":
        return build_record(cls, data, {"passes": list})


@dataclass(kw_only=True)
class LoweringReport:
    schema_version: str = LOWERING_REPORT_SCHEMA_VERSION
    toolchain_version: str = TOOLCHAIN_VERSION
    report_hash: str = ""
    source_cbir_hash: str
    total_constraints: int
    gate_counts: dict[str, int] = field(default_factory=dict)
    gates: list[LoweringGateEntry] = field(default_factory=list)
    limb_width: str
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        source_cbir_hash: str,
        total_constraints: int,
        gate_counts: Mapping[str, int],
        gates: list[LoweringGateEntry],
        limb_width: str,
        warnings: list[str],
    ) -> "LoweringReport":
        """Build a report for the current toolchain with its hash sealed."""
        report = cls(
            source_cbir_hash=source_cbir_hash,
            total_constraints=total_constraints,
            gate_counts=_sorted_counts(gate_counts),
            gates=list(gates),
            limb_width=limb_width,
            warnings=list(warnings),
        )
        report.seal_hash()
        return report

    def seal_hash(self) -> None:
        self.report_hash = _sealed_hash(self, "report_hash")

    def validate_hash(self) -> bool:
        return (
            self.report_hash == _sealed_hash(self, "report_hash")
            and self.schema_version == LOWERING_REPORT_SCHEMA_VERSION
        )

    def to_dict(self) -> dict[str, Any]:
        return _record_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LoweringReport":
        return build_record(
            cls,
            data,
            {
                "gate_counts": _sorted_counts,
                "gates": _entries(LoweringGateEntry),
                "warnings": list,
            },
        )


@dataclass(kw_only=True)
class PatternDetectionEntry:
    pattern_name: str
    confidence: str
    constraint_ids: list[int] = field(default_factory=list)
    optimized_to: str
    estimated_saving: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PatternDetectionEntry":
        return build_record(cls, data, {"constraint_ids": list})


@dataclass(kw_only=True)
class OptimizationStats:
    total_original: int
    optimized_count: int
    compatibility_count: int
    eliminated_count: int
    estimated_field_mul_savings_pct: float

    def __post_init__(self) -> None:
        self.estimated_field_mul_savings_pct = float(self.estimated_field_mul_savings_pct)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OptimizationStats":
        return build_record(cls, data)


@dataclass(kw_only=True)
class OptimizationReport:
    schema_version: str = OPTIMIZATION_REPORT_SCHEMA_VERSION
    toolchain_version: str = TOOLCHAIN_VERSION
    report_hash: str = ""
    source_cbir_hash: str
    mode: str
    min_confidence: str
    stats: OptimizationStats
    patterns: list[PatternDetectionEntry] = field(default_factory=list)
    gate_counts: dict[str, int] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        source_cbir_hash: str,
        mode: str,
        min_confidence: str,
        stats: OptimizationStats,
        patterns: list[PatternDetectionEntry],
        gate_counts: Mapping[str, int],
        warnings: list[str],
    ) -> "OptimizationReport":
        """Build a report for the current toolchain with its hash sealed."""
        report = cls(
            source_cbir_hash=source_cbir_hash,
            mode=mode,
            min_confidence=min_confidence,
            stats=stats,
            patterns=list(patterns),
            gate_counts=_sorted_counts(gate_counts),
            warnings=list(warnings),
        )
        report.seal_hash()
        return report

    def seal_hash(self) -> None:
        self.report_hash = _sealed_hash(self, "report_hash")

    def validate_hash(self) -> bool:
        return (
            self.report_hash == _sealed_hash(self, "report_hash")
            and self.schema_version == OPTIMIZATION_REPORT_SCHEMA_VERSION
        )

    def to_dict(self) -> dict[str, Any]:
        return _record_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OptimizationReport":
        return build_record(
            cls,
            data,
            {
                "stats": OptimizationStats.from_dict,
                "patterns": _entries(PatternDetectionEntry),
                "gate_counts": _sorted_counts,
                "warnings": list,
            },
        )