from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from tlb.balancer import BalancerClient
from tlb.config import ServerEndpoint

Handler = Callable[[httpx.Request], httpx.Response]


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.unit)


class RecordingBalancer:
    """MockTransport handler that records requests and serves canned routes."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], httpx.Response] = {}
        self.status_text = "RUNNING"

    def respond(self, method: str, path: str, response: httpx.Response) -> None:
        self.routes[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        canned = self.routes.get((request.method, request.url.path))
        if canned is not None:
            return canned
        if request.url.path == "/control/status":
            return httpx.Response(200, text=self.status_text)
        return httpx.Response(200, text="")

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def recording_balancer() -> RecordingBalancer:
    return RecordingBalancer()


@pytest.fixture
def client(recording_balancer: RecordingBalancer) -> BalancerClient:
    return BalancerClient(
        ServerEndpoint(host="localhost", port=8019),
        transport=httpx.MockTransport(recording_balancer),
    )
