"""
Pipeline Orchestrator — VisiHub Verify

PURPOSE:
    Entry point run by action.yml. Loads the configuration once, runs the
    six stages in order, and turns the outcome into the process exit code.

    validate inputs -> hash -> verify token -> find/create dataset
    -> create revision -> upload -> complete -> wait for check
    -> report results -> exit decision

EXIT CODES:
    0  check passed, or baseline revision, or check failed with
       fail_on_check_failure=false
    1  check failed with fail_on_check_failure=true, or any fatal error
       (bad input, rejected token, API error, upload error, import failed,
       timeout)

ERRORS:
    Fatal errors are VerifyActionError subclasses. They are reported as a
    single ::error:: annotation and no outputs are written. There are no
    automatic retries anywhere; recovery is re-running the workflow.

USAGE:
    python -m _verify_action.verify_pipeline_main
"""

import logging
import os
import sys
import time
from typing import Callable, Optional

import requests

from .action_config import ActionConfig, load_action_config
from .errors import VerifyActionError
from .github_actions import ActionsRunner
from .run_result import build_proof_url
from .stage_1_validate_inputs import validate_inputs
from .stage_2_compute_content_hash import compute_content_hash, describe_hash
from .stage_3_resolve_dataset import resolve_dataset
from .stage_4_create_and_upload_revision import (
    RevisionRequest,
    build_source_metadata,
    create_and_upload_revision,
)
from .stage_5_wait_for_check import wait_for_check
from .stage_6_report_results import report_results
from .visihub_api_client import VisiHubAPI

logger = logging.getLogger(__name__)


def run_pipeline(
    config: ActionConfig,
    runner: ActionsRunner,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Run the full publish-and-verify flow and return the exit code.

    Args:
        config: Immutable configuration from load_action_config()
        runner: Writer for stdout commands, outputs and job summary
        session: Optional requests session (tests pass a fake)
        sleep: Sleep function used by the poll loop

    Returns:
        0 or 1, see module docstring.
    """
    runner.add_mask(config.api_key)

    try:
        outputs = _publish_and_verify(config, runner, session, sleep)
    except VerifyActionError as e:
        runner.end_group()
        runner.error(e.message)
        return 1

    verdict = outputs["verification_status"]
    if config.fail_on_check_failure and verdict == "FAIL":
        return 1

    runner.log("")
    runner.log(
        f"VisiHub verification complete: {config.dataset_path} "
        f"v{outputs['version']} = {verdict}"
    )
    return 0


def main() -> int:
    try:
        config = load_action_config(os.environ)
    except VerifyActionError as e:
        ActionsRunner().error(e.message)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    runner = ActionsRunner(
        output_path=config.github_output,
        summary_path=config.github_step_summary,
    )
    return run_pipeline(config, runner)


# ---------------------------------------------------------------------------
# PRIVATE HELPER FUNCTIONS
# ---------------------------------------------------------------------------


def _publish_and_verify(
    config: ActionConfig,
    runner: ActionsRunner,
    session: Optional[requests.Session],
    sleep: Callable[[float], None],
) -> dict:
    # -----------------------------------------------------------------------
    # STAGE 1 + 2: local checks, no network
    # -----------------------------------------------------------------------

    inputs = validate_inputs(config)
    owner, slug, byte_size = inputs["owner"], inputs["slug"], inputs["byte_size"]

    runner.start_group("VisiHub Verify")
    runner.log(f"  Repo:    {owner}/{slug}")
    runner.log(f"  File:    {config.file_path} ({byte_size} bytes)")
    runner.log(f"  Dataset: {config.dataset_path}")

    content_hash = compute_content_hash(config.file_path)
    runner.log(f"  Hash:    {describe_hash(content_hash)}")

    api = VisiHubAPI(config.api_base, config.api_key, session=session)

    # -----------------------------------------------------------------------
    # STAGE 3: token + dataset
    # -----------------------------------------------------------------------

    runner.log("")
    runner.log("Verifying API token...")
    me = api.get_me()
    runner.log(f"  Authenticated as: {me.get('user_slug') if isinstance(me, dict) else None}")

    runner.log("")
    runner.log(f"Looking up dataset '{config.dataset_path}'...")
    dataset = resolve_dataset(api, owner, slug, config.dataset_path)
    if dataset["created"]:
        runner.log(f"  Dataset not found, created dataset #{dataset['dataset_id']}")
    else:
        runner.log(f"  Found dataset #{dataset['dataset_id']}")

    # -----------------------------------------------------------------------
    # STAGE 4: revision
    # -----------------------------------------------------------------------

    request = RevisionRequest(
        owner=owner,
        slug=slug,
        dataset_path=config.dataset_path,
        byte_size=byte_size,
        content_hash=content_hash,
        source_metadata=build_source_metadata(config.source_type, config.source_identity),
    )

    runner.log("")
    runner.log(f"Creating revision and uploading {byte_size} bytes...")
    revision = create_and_upload_revision(api, dataset["dataset_id"], request, config.file_path)
    revision_id = revision["revision_id"]
    runner.log(f"  Revision #{revision_id}")
    runner.log(f"  Upload complete (HTTP {revision['upload_status']})")
    runner.log(f"  Status: {revision['completion_status']}")

    # -----------------------------------------------------------------------
    # STAGE 5: wait for the server-side check
    # -----------------------------------------------------------------------

    runner.log("")
    runner.log("Waiting for import to complete...")
    run = wait_for_check(api, owner, slug, revision_id, config.poll_policy, sleep=sleep)
    runner.log(f"  Run status: {run.status}")
    runner.end_group()

    # -----------------------------------------------------------------------
    # STAGE 6: report
    # -----------------------------------------------------------------------

    return report_results(
        run=run,
        dataset_path=config.dataset_path,
        byte_size=byte_size,
        content_hash=content_hash,
        revision_id=revision_id,
        proof_url=build_proof_url(config.api_base, owner, slug, revision_id),
        runner=runner,
    )


if __name__ == "__main__":
    sys.exit(main())
