"""
Stage 6: Report Results — VisiHub Verify

PURPOSE:
    Final reporting stage. It takes the terminal run record from Stage 5
    and publishes it through every runner channel:

      1. Console lines with the verdict, check status, version, diff and
         proof URL
      2. Six step outputs in GITHUB_OUTPUT:
           verification_status  PASS | FAIL
           check_status         pass | fail | none
           diff_summary         compact JSON, or the literal "null"
           run_id               the revision id
           proof_url            signed-proof download link
           version              dataset version number
      3. A Markdown table + change list in the job summary (only when
         GITHUB_STEP_SUMMARY is set)
      4. One annotation: ::error:: on FAIL, ::notice:: on PASS

    This stage never decides the exit code. The orchestrator does that
    AFTER everything here has been written, so a blocking failure is always
    fully reported first.

VERDICT RULES:
    check_status "pass"  -> PASS
    check_status "fail"  -> FAIL
    check_status absent  -> PASS  (baseline revision, nothing to compare)

CALLED BY:
    verify_pipeline_main.py
"""

from .github_actions import ActionsRunner
from .run_result import RunResult

ANNOTATION_FAIL_TITLE = "VisiHub Verify Failed"
ANNOTATION_PASS_TITLE = "VisiHub Verify Passed"


def report_results(
    run: RunResult,
    dataset_path: str,
    byte_size: int,
    content_hash: str,
    revision_id,
    proof_url: str,
    runner: ActionsRunner,
) -> dict:
    """
    Write console report, step outputs, job summary and annotation.

    This is the ONLY public function in this file.

    Args:
        run: Terminal run record from Stage 5
        dataset_path: Dataset name (for the summary and annotation)
        byte_size: Uploaded size in bytes
        content_hash: Local hash from Stage 2 ("" if none), shown as-is
        revision_id: Revision id from Stage 4
        proof_url: Pre-built proof link (run_result.build_proof_url)
        runner: Where to write

    Returns:
        dict of the six output values, keyed by output name.
    """
    outputs = {
        "verification_status": run.verdict,
        "check_status": run.check_status,
        "diff_summary": run.diff_summary_output(),
        "run_id": str(revision_id),
        "proof_url": proof_url,
        "version": run.version_label,
    }

    # -----------------------------------------------------------------------
    # STEP 1: Console report
    # -----------------------------------------------------------------------

    runner.log("")
    runner.log(f"  Verification: {run.verdict}")
    runner.log(f"  Check status: {run.check_status}")
    runner.log(f"  Version:      v{run.version_label}")
    if run.diff_summary is not None:
        runner.log(
            f"  Diff:         rows {run.diff_summary.row_count_change} "
            f"cols {run.diff_summary.col_count_change}"
        )
    runner.log(f"  Proof URL:    {proof_url}")

    # -----------------------------------------------------------------------
    # STEP 2: Step outputs
    # -----------------------------------------------------------------------

    for name, value in outputs.items():
        runner.set_output(name, value)

    # -----------------------------------------------------------------------
    # STEP 3: Job summary
    # -----------------------------------------------------------------------

    if runner.has_step_summary:
        runner.append_step_summary(
            _format_job_summary(run, dataset_path, byte_size, content_hash, proof_url)
        )

    # -----------------------------------------------------------------------
    # STEP 4: Annotation
    # -----------------------------------------------------------------------

    if run.verdict == "FAIL":
        runner.error(_format_failure_message(run, dataset_path), title=ANNOTATION_FAIL_TITLE)
    else:
        runner.notice(
            f"{dataset_path} v{run.version_label} — integrity check passed",
            title=ANNOTATION_PASS_TITLE,
        )

    return outputs


# ---------------------------------------------------------------------------
# PRIVATE HELPER FUNCTIONS
# ---------------------------------------------------------------------------


def _format_job_summary(
    run: RunResult, dataset_path: str, byte_size: int, content_hash: str, proof_url: str
) -> str:
    """
    Build the Markdown block appended to the job summary.

    A table of facts about the new version, then (when the server produced
    a diff) a bullet list of structural changes, then the proof link.
    """
    badge = "✅ PASS" if run.verdict == "PASS" else "❌ FAIL"

    lines = [
        f"### VisiHub Verify: {badge}",
        "",
        "| | |",
        "|---|---|",
        f"| **Dataset** | `{dataset_path}` |",
        f"| **Version** | v{run.version_label} |",
        f"| **Rows** | {run.row_count_label} |",
        f"| **Columns** | {run.col_count_label} |",
        f"| **Size** | {byte_size} bytes |",
        f"| **Content hash** | `{content_hash or 'none'}` |",
    ]

    diff = run.diff_summary
    if diff is not None:
        lines.append("")
        lines.append("#### Changes from previous version")
        lines.append("")
        if diff.row_count_change > 0:
            lines.append(f"- **+{diff.row_count_change}** rows added")
        elif diff.row_count_change < 0:
            lines.append(f"- **{diff.row_count_change}** rows removed")
        if diff.cols_added:
            lines.append(f"- **+{diff.cols_added}** columns added")
        if diff.cols_removed:
            lines.append(f"- **{diff.cols_removed}** columns removed")
        if diff.cols_type_changed:
            lines.append(f"- **{diff.cols_type_changed}** column types changed")
        if not diff.has_structural_changes():
            lines.append("- No structural changes")

    lines.append("")
    lines.append(f"[Download proof]({proof_url})")

    return "\n".join(lines) + "\n"


def _format_failure_message(run: RunResult, dataset_path: str) -> str:
    """Error annotation text; lists only the non-zero change counts."""
    message = f"Snapshot integrity check failed for {dataset_path} v{run.version_label}."

    diff = run.diff_summary
    if diff is None:
        return message

    changes = []
    if diff.row_count_change:
        changes.append(f"rows: {diff.row_count_change}")
    if diff.cols_removed:
        changes.append(f"cols removed: {diff.cols_removed}")
    if diff.cols_type_changed:
        changes.append(f"type changes: {diff.cols_type_changed}")

    if changes:
        message += " Changes: " + ", ".join(changes)
    return message
