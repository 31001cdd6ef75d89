"""
VisiHub API Client — VisiHub Verify

PURPOSE:
    Thin wrapper around the VisiHub REST endpoints the action needs. Every
    stage that talks to the server goes through this class, so URL building,
    auth headers, timeouts and error translation live in one place.

ENDPOINTS USED:
    GET  /api/desktop/me                                   -> {user_slug}
    GET  /api/desktop/repos/{owner}/{slug}/datasets        -> [{id, name, ...}]
    POST /api/desktop/repos/{owner}/{slug}/datasets        -> {dataset_id}
    POST /api/desktop/datasets/{id}/revisions              -> {revision_id, upload_url, upload_headers?}
    PUT  {upload_url}                                      -> 2xx
    POST /api/desktop/revisions/{id}/complete              -> {status}
    GET  /api/repos/{owner}/{slug}/runs?limit=5            -> {runs: [...]}

ERRORS:
    Nothing is retried here. Any transport error, non-2xx status or body
    that is not JSON is raised as ApiError naming the operation, and the
    pipeline stops. The only exception is the upload, which reports the raw
    HTTP status through UploadError.
"""

import logging
import os
from typing import Optional

import requests

from . import __version__
from .errors import ApiError, AuthenticationError, UploadError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30
UPLOAD_TIMEOUT_SECONDS = 300
RUNS_PAGE_LIMIT = 5


class VisiHubAPI:
    """
    Wrapper around the VisiHub REST API for one API key.

    The session is injectable so tests can substitute a fake one.
    """

    def __init__(self, api_base: str, token: str, session: Optional[requests.Session] = None):
        self.api_base = api_base
        self.session = session if session is not None else requests.Session()
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "User-Agent": f"visihub-verify-action/{__version__}",
        }

    def get_me(self) -> dict:
        """Validate the API key. Returns the identity record."""
        try:
            return self._request("GET", "/api/desktop/me", "verify API token")
        except ApiError as e:
            raise AuthenticationError("Invalid API token") from e

    def list_datasets(self, owner: str, slug: str) -> list:
        """List the datasets of a repository, in server order."""
        data = self._request(
            "GET",
            f"/api/desktop/repos/{owner}/{slug}/datasets",
            f"list datasets for {owner}/{slug}",
        )
        if not isinstance(data, list):
            raise ApiError(f"list datasets for {owner}/{slug}", "expected a JSON array")
        return data

    def create_dataset(self, owner: str, slug: str, name: str) -> dict:
        return self._request(
            "POST",
            f"/api/desktop/repos/{owner}/{slug}/datasets",
            "create dataset",
            json={"name": name},
        )

    def create_revision(self, dataset_id, payload: dict) -> dict:
        return self._request(
            "POST",
            f"/api/desktop/datasets/{dataset_id}/revisions",
            "create revision",
            json=payload,
        )

    def complete_revision(self, revision_id, payload: dict) -> dict:
        return self._request(
            "POST",
            f"/api/desktop/revisions/{revision_id}/complete",
            "complete revision",
            json=payload,
        )

    def list_recent_runs(self, owner: str, slug: str) -> list:
        """Return the most recent runs of a repository (newest first)."""
        data = self._request(
            "GET",
            f"/api/repos/{owner}/{slug}/runs",
            "fetch runs",
            params={"limit": RUNS_PAGE_LIMIT},
        )
        runs = data.get("runs") if isinstance(data, dict) else None
        if not isinstance(runs, list):
            raise ApiError("fetch runs", "response has no 'runs' array")
        return runs

    def upload_file(self, upload_url: str, upload_headers: dict, file_path: str) -> int:
        """
        PUT the raw file bytes to a presigned upload URL.

        Only the server-provided headers are sent; the API bearer token is
        never forwarded to the storage host. Returns the HTTP status code.

        A zero-byte file is sent as b"" so the request carries
        Content-Length: 0; an empty stream would go out chunked, which
        presigned object-store URLs reject.
        """
        logger.debug("PUT %s (%d header(s))", upload_url, len(upload_headers))
        try:
            with open(file_path, "rb") as f:
                body = f if os.fstat(f.fileno()).st_size else b""
                resp = self.session.put(
                    upload_url,
                    headers=dict(upload_headers),
                    data=body,
                    timeout=UPLOAD_TIMEOUT_SECONDS,
                )
        except requests.RequestException as e:
            raise UploadError(detail=str(e)) from e

        if resp.status_code < 200 or resp.status_code >= 300:
            raise UploadError(resp.status_code)
        return resp.status_code

    def _request(self, method: str, path: str, operation: str, **kwargs):
        url = f"{self.api_base}{path}"
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(
                method, url, headers=self.headers, timeout=REQUEST_TIMEOUT_SECONDS, **kwargs
            )
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise ApiError(operation, str(e)) from e
        except ValueError as e:
            raise ApiError(operation, f"invalid JSON response ({e})") from e
