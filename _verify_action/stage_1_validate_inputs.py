"""
Stage 1: Validate Inputs — VisiHub Verify

PURPOSE:
    First stage of the pipeline. It checks the action inputs before any
    network call is made and derives the values later stages need: the
    repository owner and slug, and the byte size of the file to upload.

    This stage is a cheap gatekeeper. If it fails, we never contact the
    VisiHub API at all.

CALLED BY:
    verify_pipeline_main.py — passes the ActionConfig built at startup.

CHECKS:
    - api_key is non-empty
    - repo is non-empty
    - file_path points to an existing, readable regular file

REPO SPLITTING:
    owner = text before the FIRST "/", slug = text after the LAST "/".
    For the expected "owner/slug" form these are the two halves. A value
    with more than one "/" (e.g. "a/b/c") yields owner "a" and slug "c".
    A value with no "/" yields the same string for both.
"""

import os

from .action_config import ActionConfig
from .errors import InputError


def validate_inputs(config: ActionConfig) -> dict:
    """
    Validate the inputs and derive owner, slug and byte size.

    This is the ONLY public function in this file.

    Args:
        config: The immutable action configuration.

    Returns:
        dict with keys:
            - 'owner' (str): repository owner
            - 'slug' (str): repository slug
            - 'byte_size' (int): size of the file in bytes

    Raises:
        InputError: on the first failed check.
    """
    if not config.api_key:
        raise InputError("api_key is required")
    if not config.repo:
        raise InputError("repo is required")
    if not config.file_path or not os.path.isfile(config.file_path):
        raise InputError(f"File not found: {config.file_path}")
    if not os.access(config.file_path, os.R_OK):
        raise InputError(f"File is not readable: {config.file_path}")

    owner, slug = _split_repo(config.repo)

    return {
        "owner": owner,
        "slug": slug,
        "byte_size": os.path.getsize(config.file_path),
    }


def _split_repo(repo: str):
    owner = repo.split("/", 1)[0]
    slug = repo.rsplit("/", 1)[-1]
    return owner, slug
