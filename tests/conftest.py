"""
Shared fixtures: a scripted in-memory HTTP session, a runner that writes
to tmp files, and a small CSV on disk.
"""

import io

import pytest
import requests

from _verify_action.action_config import ActionConfig
from _verify_action.github_actions import ActionsRunner

API_BASE = "https://api.test"

_NO_JSON = object()


class FakeResponse:
    def __init__(self, status_code=200, json_data=None):
        self.status_code = status_code
        self._json_data = json_data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._json_data is _NO_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json_data


def not_json(status_code=200):
    return FakeResponse(status_code, _NO_JSON)


class FakeSession:
    """
    Routes (method, url) to a queue of responses. The last queued response
    is returned again on every later call, which is what a poll needs.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.uploads = []
        self.upload_response = FakeResponse(200)

    def add(self, method, path, *responses):
        self.routes.setdefault((method, API_BASE + path), []).extend(responses)

    def request(self, method, url, headers=None, timeout=None, json=None, params=None):
        self.calls.append({
            "method": method,
            "url": url,
            "headers": headers,
            "json": json,
            "params": params,
        })
        queue = self.routes.get((method, url))
        if not queue:
            raise requests.ConnectionError(f"no route for {method} {url}")
        resp = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(resp, Exception):
            raise resp
        return resp

    def put(self, url, headers=None, data=None, timeout=None):
        # Framing headers (Content-Length / Transfer-Encoding) as requests would send them.
        prepared = requests.Request("PUT", url, headers=headers, data=data).prepare()
        self.uploads.append({
            "url": url,
            "headers": headers,
            "wire_headers": dict(prepared.headers),
            "body": data if isinstance(data, bytes) else data.read(),
        })
        if isinstance(self.upload_response, Exception):
            raise self.upload_response
        return self.upload_response

    def calls_to(self, method, path):
        return [c for c in self.calls if c["method"] == method and c["url"] == API_BASE + path]


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "sales.csv"
    path.write_text("id,region,amount\n1,north,10\n2,south,20\n")
    return path


@pytest.fixture
def runner(tmp_path):
    output = tmp_path / "github_output"
    summary = tmp_path / "step_summary"
    output.touch()
    summary.touch()
    return ActionsRunner(
        output_path=str(output),
        summary_path=str(summary),
        stream=io.StringIO(),
    )


@pytest.fixture
def make_config(csv_file):
    def _make(**overrides):
        values = {
            "api_key": "vh_test_key",
            "repo": "acme/warehouse",
            "file_path": str(csv_file),
            "dataset_path": csv_file.name,
            "api_base": API_BASE,
        }
        values.update(overrides)
        return ActionConfig(**values)

    return _make


def read_outputs(runner):
    """Parse simple key=value lines from the runner's outputs file."""
    with open(runner.output_path) as f:
        lines = [line.rstrip("\n") for line in f if line.strip()]
    return dict(line.split("=", 1) for line in lines)


def stdout_of(runner):
    return runner.stream.getvalue()
