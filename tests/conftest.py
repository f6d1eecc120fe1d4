from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
import requests


class FakeClock:
    """A clock that only moves when something sleeps on it."""

    def __init__(self, start: datetime) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> datetime:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += timedelta(seconds=seconds)


class FakeResponse:
    def __init__(self, status_code: int, reason: str, body: bytes) -> None:
        self.status_code = status_code
        self.reason = reason
        self._body = body
        self.closed = False

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        for i in range(0, len(self._body), chunk_size):
            yield self._body[i : i + chunk_size]

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *_) -> None:
        self.closed = True


class FakeServer:
    def __init__(self) -> None:
        self.status_code = 200
        self.reason = "OK"
        self.body = b""
        self.requests: list[dict] = []

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.requests.append(dict(url=url, **kwargs))
        return FakeResponse(self.status_code, self.reason, self.body)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2020, 12, 1, 4, 59, 50, tzinfo=timezone.utc))


@pytest.fixture
def server(monkeypatch: pytest.MonkeyPatch) -> FakeServer:
    fake = FakeServer()
    monkeypatch.setattr(requests, "get", fake.get)
    return fake


@pytest.fixture
def workdir(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Run inside an empty directory that is also $HOME, with no $AOC_SESSION."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("AOC_SESSION", raising=False)
    monkeypatch.chdir(home)
    return home
