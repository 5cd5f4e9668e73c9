import io

import pytest

from pipeline.header import parse_header
from tests.fakes.fake_connection import FakeServer


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def cpu_header():
    return parse_header(io.BytesIO(b"tags,hostname,region\ncpu,usage_user,usage_system\n\n"))
