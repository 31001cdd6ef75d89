"""
Action Configuration — VisiHub Verify

PURPOSE:
    Read the action inputs ONCE, at startup, into an immutable ActionConfig.
    Every stage receives the values it needs as arguments; nothing downstream
    reads os.environ on its own.

CALLED BY:
    verify_pipeline_main.py — main() builds the config from os.environ and
    hands it to run_pipeline().

ENVIRONMENT:
    action.yml maps each action input to a VISIHUB_* variable:

        api_key                -> VISIHUB_API_KEY          (required, secret)
        repo                   -> VISIHUB_REPO             (required, owner/slug)
        file_path              -> VISIHUB_FILE_PATH        (required)
        dataset_path           -> VISIHUB_DATASET_PATH     (default: file basename)
        message                -> VISIHUB_MESSAGE
        source_type            -> VISIHUB_SOURCE_TYPE
        source_identity        -> VISIHUB_SOURCE_IDENTITY
        fail_on_check_failure  -> VISIHUB_FAIL_ON_CHECK    (default: true)
        api_base               -> VISIHUB_API_BASE         (default: production)

    The runner itself provides GITHUB_OUTPUT, GITHUB_STEP_SUMMARY and
    RUNNER_DEBUG.

DESIGN DECISIONS:
    - Required-field checks are NOT done here. Stage 1 owns them so that a
      missing api_key and a missing file are reported the same way.
    - The boolean input follows the Actions toolkit rules: only the
      true/True/TRUE and false/False/FALSE spellings are accepted.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .errors import InputError
from .polling import PollPolicy


DEFAULT_API_BASE = "https://visihub.app"

_TRUE_VALUES = ("true", "True", "TRUE")
_FALSE_VALUES = ("false", "False", "FALSE")


@dataclass(frozen=True)
class ActionConfig:
    api_key: str
    repo: str
    file_path: str
    dataset_path: str
    api_base: str = DEFAULT_API_BASE
    message: str = ""
    source_type: str = ""
    source_identity: str = ""
    fail_on_check_failure: bool = True
    github_output: Optional[str] = None
    github_step_summary: Optional[str] = None
    debug: bool = False
    poll_policy: PollPolicy = field(default_factory=PollPolicy)


def load_action_config(environ: Mapping[str, str]) -> ActionConfig:
    """
    Build the ActionConfig from an environment mapping.

    Args:
        environ: Usually os.environ. Tests pass a plain dict.

    Returns:
        A frozen ActionConfig.

    Raises:
        InputError: if VISIHUB_FAIL_ON_CHECK is not a recognised boolean.
    """
    file_path = environ.get("VISIHUB_FILE_PATH", "").strip()
    dataset_path = environ.get("VISIHUB_DATASET_PATH", "").strip()
    if not dataset_path and file_path:
        dataset_path = os.path.basename(file_path)

    api_base = environ.get("VISIHUB_API_BASE", "").strip() or DEFAULT_API_BASE

    return ActionConfig(
        api_key=environ.get("VISIHUB_API_KEY", "").strip(),
        repo=environ.get("VISIHUB_REPO", "").strip(),
        file_path=file_path,
        dataset_path=dataset_path,
        api_base=api_base.rstrip("/"),
        message=environ.get("VISIHUB_MESSAGE", ""),
        source_type=environ.get("VISIHUB_SOURCE_TYPE", "").strip(),
        source_identity=environ.get("VISIHUB_SOURCE_IDENTITY", "").strip(),
        fail_on_check_failure=_parse_boolean_input(
            "fail_on_check_failure", environ.get("VISIHUB_FAIL_ON_CHECK", ""), True
        ),
        github_output=environ.get("GITHUB_OUTPUT") or None,
        github_step_summary=environ.get("GITHUB_STEP_SUMMARY") or None,
        debug=environ.get("RUNNER_DEBUG", "") == "1",
    )


def _parse_boolean_input(name: str, raw: str, default: bool) -> bool:
    value = raw.strip()
    if not value:
        return default
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InputError(
        f"Input '{name}' must be a boolean (true or false), got '{value}'"
    )
