"""
Stage 5: Wait For Check — VisiHub Verify

PURPOSE:
    After the revision is completed, the server imports the file and runs
    its integrity check asynchronously. This stage polls the repository's
    recent runs until the run for our revision reaches a terminal status.

CALLED BY:
    verify_pipeline_main.py — passes the revision id from Stage 4.

STATES (per poll):
    searching    run for our revision not in the recent list -> sleep, retry
    in-progress  any non-terminal status                     -> sleep, retry
    verified     terminal success                            -> return the run
    completed    terminal success                            -> return the run
    failed       processing failure                          -> ProcessingFailedError now
    (ceiling)    accumulated wait hits the policy ceiling    -> PollTimeoutError

    A failed runs-list call is fatal (ApiError). Re-listing is a status
    check, not a retry of a failed request.

MATCHING:
    Run ids are compared as strings so "42" and 42 match; JSON
    ids may arrive as strings or numbers.
"""

import logging
import time
from typing import Callable, Optional

from .errors import ProcessingFailedError
from .polling import PollPolicy, poll_until
from .run_result import RunResult
from .visihub_api_client import VisiHubAPI

logger = logging.getLogger(__name__)


def wait_for_check(
    api: VisiHubAPI,
    owner: str,
    slug: str,
    revision_id,
    policy: PollPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """
    Poll recent runs until the revision's run is verified or completed.

    This is the ONLY public function in this file.

    Returns:
        The last fetched RunResult for the revision.

    Raises:
        ProcessingFailedError: the server reported status 'failed'.
        PollTimeoutError: no terminal status within policy.max_wait_seconds.
        ApiError: a runs-list call failed.
    """

    def check() -> Optional[RunResult]:
        runs = api.list_recent_runs(owner, slug)
        raw = _find_run(runs, revision_id)
        if raw is None:
            logger.debug("run for revision %s not listed yet", revision_id)
            return None

        run = RunResult.from_api(raw)
        if run.is_failed:
            raise ProcessingFailedError(revision_id)
        if run.is_terminal_success:
            return run

        logger.debug("run %s status %r, still waiting", revision_id, run.status)
        return None

    return poll_until(check, policy, sleep=sleep)


def _find_run(runs: list, revision_id) -> Optional[dict]:
    wanted = str(revision_id)
    for run in runs:
        if isinstance(run, dict) and str(run.get("id")) == wanted:
            return run
    return None
