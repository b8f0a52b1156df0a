import json
import time
from email import message_from_bytes
from email.policy import default as default_policy
from typing import Callable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from file_server.config import Settings
from file_server.main import create_app

CC_ADDRESS = "http://cc.example.com"
POLLING_INTERVAL = 0.1


def job_body(job_guid: str, status: str, base_url: str = "") -> str:
    url = f"{base_url}/v2/jobs/{job_guid}"
    return json.dumps({
        "metadata": {"guid": job_guid, "url": url},
        "entity": {"status": status},
    })


def parse_multipart(request: httpx.Request) -> dict:
    """Map form field name -> (filename, bytes) for a recorded multipart request."""
    raw = b"Content-Type: " + request.headers["content-type"].encode() + b"\r\n\r\n" + request.content
    message = message_from_bytes(raw, policy=default_policy)
    fields = {}
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        fields[name] = (part.get_filename(), part.get_payload(decode=True))
    return fields


class FakeCloudController:
    """Scripted backend: one upload response, then a queue of poll responses."""

    def __init__(self):
        self.upload_status = 201
        self.upload_body = job_body("my-job-guid", "finished", CC_ADDRESS)
        self.upload_error: Optional[Exception] = None
        self.polls: List[Callable[[httpx.Request], httpx.Response]] = []
        self.requests: List[httpx.Request] = []
        self.poll_times: List[float] = []

    def respond_to_polls(self, *statuses: str, job_guid: str = "my-job-guid"):
        for status in statuses:
            self.polls.append(
                lambda request, status=status: httpx.Response(200, text=job_body(job_guid, status))
            )

    @property
    def upload_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def poll_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            assert request.url.path == "/staging/droplets/app-guid/upload"
            assert request.url.params["async"] == "true"
            if self.upload_error is not None:
                raise self.upload_error
            return httpx.Response(self.upload_status, text=self.upload_body)

        assert request.method == "GET"
        assert request.url.path == "/v2/jobs/my-job-guid"
        self.poll_times.append(time.monotonic())
        if not self.polls:
            raise AssertionError("unexpected poll")
        return self.polls.pop(0)(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def fake_cc() -> FakeCloudController:
    return FakeCloudController()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        cc_address=CC_ADDRESS,
        cc_username="bob",
        cc_password="password",
        cc_job_polling_interval=POLLING_INTERVAL,
        static_directory=str(tmp_path),
        _env_file=None,
    )


@pytest.fixture
def client(settings, fake_cc) -> TestClient:
    with TestClient(create_app(settings, transport=fake_cc.transport)) as test_client:
        yield test_client
