import pytest
import requests

import geforce_driver_check as gdc

SAMPLE_PAYLOAD = (
    '{ "Success" : "1", "IDS" : [ { "downloadInfo": { "Version" : "123.45", '
    '"DownloadURL" : "https://example.com/test.exe" } } ] }'
)


class FakeFetcher:
    """Returns a canned page, or raises, and remembers the URLs asked for."""

    def __init__(self, payload=SAMPLE_PAYLOAD, error=None):
        self.payload = payload
        self.error = error
        self.urls = []

    def fetch(self, url):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.payload


class FakeResponse:
    def __init__(self, chunks=(), headers=None, status_code=200, fail_after=None):
        self.chunks = list(chunks)
        self.headers = headers or {}
        self.status_code = status_code
        self.fail_after = fail_after

    @property
    def content(self):
        return b"".join(self.chunks)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size=1):
        for index, chunk in enumerate(self.chunks):
            if self.fail_after is not None and index == self.fail_after:
                raise requests.exceptions.ChunkedEncodingError("Connection broken")
            yield chunk

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


class FakeLauncher:
    def __init__(self, exit_code=0, on_install=None):
        self.exit_code = exit_code
        self.on_install = on_install
        self.opened = []
        self.installed = []

    def open_url(self, url):
        self.opened.append(url)

    def run_installer(self, path, arguments):
        self.installed.append((path, list(arguments)))
        if self.on_install:
            self.on_install(path)
        return self.exit_code


class FakePrompt:
    def __init__(self, answer=0):
        self.answer = answer
        self.calls = []

    def __call__(self, message, options, default):
        self.calls.append((message, list(options), default))
        return self.answer


@pytest.fixture
def config(tmp_path):
    return gdc.DriverCheckConfig(tmp_path / "config")


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def launcher():
    return FakeLauncher()


@pytest.fixture
def fake_launcher():
    return FakeLauncher


@pytest.fixture
def fake_prompt():
    return FakePrompt
