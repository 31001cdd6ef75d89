import json

from conftest import read_outputs, stdout_of
from _verify_action.run_result import RunResult
from _verify_action.stage_6_report_results import report_results

PROOF_URL = "https://api.test/api/repos/acme/warehouse/runs/41/proof"
HASH = "blake3:" + "c" * 64


def _report(runner, run_json, content_hash=HASH):
    return report_results(
        run=RunResult.from_api(run_json),
        dataset_path="sales.csv",
        byte_size=1234,
        content_hash=content_hash,
        revision_id=41,
        proof_url=PROOF_URL,
        runner=runner,
    )


def _summary(runner):
    with open(runner.summary_path) as f:
        return f.read()


def test_failed_check_with_removed_rows(runner):
    outputs = _report(runner, {
        "id": 41,
        "status": "verified",
        "check_status": "fail",
        "diff_summary": {"row_count_change": -50, "col_count_change": 0},
        "version": 3,
        "row_count": 950,
        "col_count": 12,
    })

    assert outputs["verification_status"] == "FAIL"
    assert read_outputs(runner) == {
        "verification_status": "FAIL",
        "check_status": "fail",
        "diff_summary": json.dumps({"row_count_change": -50, "col_count_change": 0}, separators=(",", ":")),
        "run_id": "41",
        "proof_url": PROOF_URL,
        "version": "3",
    }

    summary = _summary(runner)
    assert summary.startswith("### VisiHub Verify: ❌ FAIL\n")
    assert "| **Rows** | 950 |" in summary
    assert "| **Columns** | 12 |" in summary
    assert "| **Size** | 1234 bytes |" in summary
    assert f"| **Content hash** | `{HASH}` |" in summary
    assert "#### Changes from previous version" in summary
    assert "- **-50** rows removed" in summary
    assert f"[Download proof]({PROOF_URL})" in summary

    stdout = stdout_of(runner)
    assert (
        "::error title=VisiHub Verify Failed::Snapshot integrity check failed "
        "for sales.csv v3. Changes: rows: -50\n"
    ) in stdout
    assert "  Diff:         rows -50 cols 0" in stdout


def test_baseline_revision_passes(runner):
    outputs = _report(runner, {"id": 41, "status": "verified", "version": 1}, content_hash="")

    assert outputs["verification_status"] == "PASS"
    assert outputs["check_status"] == "none"
    assert outputs["diff_summary"] == "null"
    assert read_outputs(runner)["diff_summary"] == "null"

    summary = _summary(runner)
    assert summary.startswith("### VisiHub Verify: ✅ PASS\n")
    assert "| **Rows** | — |" in summary
    assert "| **Content hash** | `none` |" in summary
    assert "Changes from previous version" not in summary

    assert "::notice title=VisiHub Verify Passed::sales.csv v1 — integrity check passed" in stdout_of(runner)


def test_change_list_lines(runner):
    _report(runner, {
        "id": 41,
        "status": "verified",
        "check_status": "pass",
        "diff_summary": {
            "row_count_change": 12,
            "cols_added": 2,
            "cols_removed": 1,
            "cols_type_changed": 3,
        },
        "version": 4,
    })

    summary = _summary(runner)
    assert "- **+12** rows added" in summary
    assert "- **+2** columns added" in summary
    assert "- **1** columns removed" in summary
    assert "- **3** column types changed" in summary
    assert "No structural changes" not in summary


def test_no_structural_changes(runner):
    _report(runner, {
        "id": 41,
        "status": "verified",
        "check_status": "pass",
        "diff_summary": {"row_count_change": 0},
        "version": 5,
    })

    assert "- No structural changes" in _summary(runner)


def test_failure_annotation_lists_only_nonzero_fields(runner):
    _report(runner, {
        "id": 41,
        "status": "verified",
        "check_status": "fail",
        "diff_summary": {"cols_added": 4, "cols_removed": 2, "cols_type_changed": 1},
        "version": 6,
    })

    assert (
        "Snapshot integrity check failed for sales.csv v6. "
        "Changes: cols removed: 2, type changes: 1\n"
    ) in stdout_of(runner)


def test_failure_annotation_without_diff(runner):
    _report(runner, {"id": 41, "status": "verified", "check_status": "fail", "version": 2})

    assert stdout_of(runner).endswith(
        "::error title=VisiHub Verify Failed::Snapshot integrity check failed for sales.csv v2.\n"
    )


def test_no_summary_channel(runner):
    runner.summary_path = None

    _report(runner, {"id": 41, "status": "verified", "check_status": "pass", "version": 2})

    assert read_outputs(runner)["verification_status"] == "PASS"
