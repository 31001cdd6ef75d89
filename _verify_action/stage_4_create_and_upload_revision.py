"""
Stage 4: Create & Upload Revision — VisiHub Verify

PURPOSE:
    Turn the local file into a completed revision on the server:

      1. POST the revision request (byte size, hash, provenance) to the
         dataset. The server answers with a revision id and a presigned
         upload target (URL + headers).
      2. PUT the raw file bytes to that target.
      3. POST the completion call so the revision leaves the pending state
         and the server starts its integrity check.

    Revision lifecycle: pending -> uploaded -> completed -> (server) checked.

CALLED BY:
    verify_pipeline_main.py — passes a RevisionRequest built from the config
    and the Stage 1/2/3 results.

SOURCE METADATA:
    When source_type or source_identity is set, the request carries
    {"type"?, "identity"?, "timestamp"}. The timestamp is the UTC time at
    which the request is built, formatted YYYY-MM-DDTHH:MM:SSZ. It is the
    runner's clock, not the server's.

CONTENT HASH:
    Only a BLAKE3 hash goes into either request; see
    stage_2_compute_content_hash.hash_sent_to_server().
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .errors import ApiError
from .stage_2_compute_content_hash import hash_sent_to_server
from .visihub_api_client import VisiHubAPI

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass(frozen=True)
class SourceMetadata:
    type: str = ""
    identity: str = ""
    timestamp: str = ""

    def to_payload(self) -> dict:
        payload = {}
        if self.type:
            payload["type"] = self.type
        if self.identity:
            payload["identity"] = self.identity
        payload["timestamp"] = self.timestamp
        return payload


@dataclass(frozen=True)
class RevisionRequest:
    owner: str
    slug: str
    dataset_path: str
    byte_size: int
    content_hash: str = ""
    source_metadata: Optional[SourceMetadata] = None

    def to_payload(self) -> dict:
        payload = {"byte_size": self.byte_size}
        sent_hash = hash_sent_to_server(self.content_hash)
        if sent_hash:
            payload["content_hash"] = sent_hash
        if self.source_metadata is not None:
            payload["source_metadata"] = self.source_metadata.to_payload()
        return payload


def build_source_metadata(
    source_type: str, source_identity: str, now: Optional[datetime] = None
) -> Optional[SourceMetadata]:
    """Return SourceMetadata if either field is set, else None."""
    if not source_type and not source_identity:
        return None
    now = now or datetime.now(timezone.utc)
    return SourceMetadata(
        type=source_type,
        identity=source_identity,
        timestamp=now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT),
    )


def create_and_upload_revision(
    api: VisiHubAPI,
    dataset_id,
    request: RevisionRequest,
    file_path: str,
) -> dict:
    """
    Create a revision, upload the file, and complete the revision.

    This is the main public function in this file.

    Args:
        api: Authenticated VisiHub client
        dataset_id: Dataset id from Stage 3
        request: The immutable revision request
        file_path: Local path of the file to upload

    Returns:
        dict with keys:
            - 'revision_id': server id of the new revision
            - 'upload_status' (int): HTTP status of the upload PUT
            - 'completion_status' (str or None): status from the complete call

    Raises:
        ApiError: if creation or completion fails, or the creation response
                  lacks a revision id or upload URL.
        UploadError: if the PUT returns a non-2xx status.
    """

    # -----------------------------------------------------------------------
    # STEP 1: Create the revision and get the upload target
    # -----------------------------------------------------------------------

    created = api.create_revision(dataset_id, request.to_payload())
    if not isinstance(created, dict):
        raise ApiError("create revision", "unexpected response body")

    revision_id = created.get("revision_id")
    upload_url = created.get("upload_url")
    if revision_id is None or not upload_url:
        raise ApiError("create revision", "response did not include revision_id and upload_url")

    upload_headers = created.get("upload_headers") or {}
    if not isinstance(upload_headers, dict):
        raise ApiError("create revision", "upload_headers is not an object")

    # -----------------------------------------------------------------------
    # STEP 2: Upload the file bytes
    # -----------------------------------------------------------------------

    upload_status = api.upload_file(
        upload_url,
        {str(k): str(v) for k, v in upload_headers.items()},
        file_path,
    )

    # -----------------------------------------------------------------------
    # STEP 3: Complete the revision
    # -----------------------------------------------------------------------

    complete_payload = {}
    sent_hash = hash_sent_to_server(request.content_hash)
    if sent_hash:
        complete_payload["content_hash"] = sent_hash

    completed = api.complete_revision(revision_id, complete_payload)
    completion_status = completed.get("status") if isinstance(completed, dict) else None

    return {
        "revision_id": revision_id,
        "upload_status": upload_status,
        "completion_status": completion_status,
    }
