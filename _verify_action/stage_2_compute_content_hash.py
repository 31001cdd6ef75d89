"""
Stage 2: Compute Content Hash — VisiHub Verify

PURPOSE:
    Fingerprint the file locally, before any network call, with the
    strongest hashing tool installed on the runner. The result is a tagged
    string, "blake3:<hex>" or "sha256:<hex>", or "" when no tool is
    available. A missing tool never aborts the run.

CALLED BY:
    verify_pipeline_main.py — passes the validated file path.

TOOL ORDER:
    1. b3sum --no-names <file>        -> blake3:<hex>
    2. sha256sum <file>               -> sha256:<hex>
    3. shasum -a 256 <file>           -> sha256:<hex>  (macOS runners)

    Tools are found with shutil.which. A tool that exits non-zero or prints
    no digest is skipped with a warning and the next one is tried.

SERVER ASYMMETRY:
    Only a BLAKE3 hash is sent to the server (revision creation and
    completion). A SHA-256 fallback is shown in the log and the job summary
    but left out of both requests. hash_sent_to_server() encodes that rule
    so the two request builders cannot drift apart.
"""

import logging
import shutil
import subprocess

logger = logging.getLogger(__name__)

PREFERRED_ALGORITHM = "blake3"

# (algorithm tag, command prefix). The file path is appended.
HASH_TOOLS = [
    ("blake3", ["b3sum", "--no-names"]),
    ("sha256", ["sha256sum"]),
    ("sha256", ["shasum", "-a", "256"]),
]

HASH_TOOL_TIMEOUT_SECONDS = 120


def compute_content_hash(file_path: str) -> str:
    """
    Hash the file with the first usable tool in HASH_TOOLS.

    This is the main public function in this file.

    Args:
        file_path: Path to the CSV/TSV file (already validated by Stage 1).

    Returns:
        "blake3:<hex>", "sha256:<hex>", or "" if no tool produced a digest.
    """
    for algorithm, command in HASH_TOOLS:
        executable = shutil.which(command[0])
        if not executable:
            logger.debug("hash tool %s not found", command[0])
            continue

        digest = _run_hash_tool([executable] + command[1:] + [file_path])
        if digest:
            logger.debug("hashed %s with %s", file_path, command[0])
            return f"{algorithm}:{digest}"

    return ""


def hash_sent_to_server(content_hash: str) -> str:
    """Return the hash to include in API requests, or "" to omit it."""
    if content_hash.startswith(f"{PREFERRED_ALGORITHM}:"):
        return content_hash
    return ""


def describe_hash(content_hash: str) -> str:
    """One-line description of the hash for the console report."""
    if not content_hash:
        return "(none — install b3sum for BLAKE3)"
    if not content_hash.startswith(f"{PREFERRED_ALGORITHM}:"):
        return f"{content_hash} ({content_hash.split(':', 1)[0]} fallback)"
    return content_hash


# ---------------------------------------------------------------------------
# PRIVATE HELPER FUNCTIONS
# ---------------------------------------------------------------------------


def _run_hash_tool(argv: list) -> str:
    """
    Run a *sum-style tool and return the lowercase hex digest, or "".

    All three tools print the digest as the first whitespace-separated
    token on stdout (b3sum --no-names prints only the digest).
    """
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            timeout=HASH_TOOL_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("hash tool %s failed: %s", argv[0], e)
        return ""

    if result.returncode != 0:
        logger.warning(
            "hash tool %s exited with %d: %s",
            argv[0], result.returncode, (result.stderr or "").strip(),
        )
        return ""

    tokens = result.stdout.split()
    if not tokens:
        logger.warning("hash tool %s printed no digest", argv[0])
        return ""
    return tokens[0].lower()
