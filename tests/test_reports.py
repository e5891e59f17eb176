import json

from cirbinius.artifacts import sha256_prefixed
from cirbinius.reports import (
    LoweringGateEntry,
    LoweringReport,
    OptimizationReport,
    OptimizationStats,
    PatternDetectionEntry,
)


def _lowering_report(gate_counts=None):
    if gate_counts is None:
        gate_counts = {"mul": 1, "boolean": 2}
    return LoweringReport.create(
        sha256_prefixed(b"cbir-doc"), 3, gate_counts, [], "u32", []
    )


def _optimization_report():
    return OptimizationReport.create(
        sha256_prefixed(b"cbir-doc"),
        "optimized",
        "Strong",
        OptimizationStats(
            total_original=100,
            optimized_count=60,
            compatibility_count=40,
            eliminated_count=0,
            estimated_field_mul_savings_pct=42.5,
        ),
        [
            PatternDetectionEntry(
                pattern_name="boolean-constraint",
                confidence="Exact",
                constraint_ids=[1, 2, 3, 4, 5],
                optimized_to="boolean",
                estimated_saving="3x",
            )
        ],
        {"boolean": 5},
        [],
    )


def test_lowering_report_hash_roundtrip_validates():
    report = _lowering_report()
    assert report.validate_hash()
    assert report.report_hash.startswith("sha256:")
    assert report.schema_version == "lowering-report/v1"


def test_optimization_report_hash_roundtrip_validates():
    report = _optimization_report()
    assert report.validate_hash()
    assert report.schema_version == "optimization-report/v1"


def test_lowering_report_detects_tampering():
    report = _lowering_report()
    report.total_constraints = 4
    assert not report.validate_hash()


def test_lowering_report_rejects_wrong_schema_version():
    report = _lowering_report()
    report.schema_version = "lowering-report/v2"
    report.seal_hash()
    assert not report.validate_hash()


def test_gate_count_order_does_not_change_hash():
    first = _lowering_report({"mul": 1, "boolean": 2})
    second = _lowering_report({"boolean": 2, "mul": 1})
    assert first.report_hash == second.report_hash
    assert list(first.to_dict()["gate_counts"]) == ["boolean", "mul"]


def test_lowering_report_with_gates_round_trips():
    gate = LoweringGateEntry(
        constraint_id=7, gate_kind="hash", num_signals=2, limb_width="field", passes=["hash"]
    )
    report = LoweringReport.create(
        sha256_prefixed(b"doc"), 1, {"hash": 1}, [gate], "auto", ["warn"]
    )
    restored = LoweringReport.from_dict(json.loads(json.dumps(report.to_dict())))
    assert restored == report
    assert restored.validate_hash()


def test_optimization_report_detects_tampering():
    report = _optimization_report()
    report.patterns[0].constraint_ids.append(6)
    assert not report.validate_hash()


def test_optimization_report_round_trips():
    report = _optimization_report()
    restored = OptimizationReport.from_dict(json.loads(json.dumps(report.to_dict())))
    assert restored == report
    assert restored.validate_hash()


def test_savings_pct_is_stored_as_float():
    stats = OptimizationStats(
        total_original=1,
        optimized_count=1,
        compatibility_count=0,
        eliminated_count=0,
        estimated_field_mul_savings_pct=10,
    )
    assert stats.estimated_field_mul_savings_pct == 10.0
    assert isinstance(stats.estimated_field_mul_savings_pct, float)