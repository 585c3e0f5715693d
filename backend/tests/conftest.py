import io
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import boto3
import pytest
from fastapi.testclient import TestClient
from limits.storage import MemoryStorage
from moto import mock_aws
from PIL import Image

from photodrop.config import settings
from photodrop.limiter import limiter
from photodrop.services.gate import UploadGate
from photodrop.services.quota import LimitsQuotaStore, QuotaTracker

MIB = 1024 * 1024


def image_bytes(fmt="PNG", size=None):
    """Real PNG/JPEG bytes, zero-padded up to `size` when given."""
    buffer = io.BytesIO()
    Image.new("RGB", (16, 16), color="red").save(buffer, format=fmt)
    data = buffer.getvalue()
    if size is not None and size > len(data):
        data += b"\x00" * (size - len(data))
    return data


class FakeClock:
    def __init__(self, now=None):
        self.now = now or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class StubUploader:
    """Records calls; returns a URL, raises `error`, or sleeps `delay` first."""

    def __init__(self, error=None, delay=0.0):
        self.error = error
        self.delay = delay
        self.calls = []

    def upload(self, data, descriptor):
        self.calls.append((data, descriptor))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return f"https://media.example.com/{descriptor.key}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker(clock):
    return QuotaTracker(store=LimitsQuotaStore(MemoryStorage()), clock=clock)


@pytest.fixture
def uploader():
    return StubUploader()


@pytest.fixture
def gate(tracker, uploader):
    return UploadGate(tracker=tracker, uploader=uploader, timeout=5)


@pytest.fixture
def client(gate):
    """TestClient wired to an isolated gate; burst limiter reset per test."""
    from photodrop.main import app

    limiter.reset()
    with patch("photodrop.routes.upload.upload_gate", gate), \
            patch("photodrop.routes.pages.upload_gate", gate), \
            patch("photodrop.routes.quota.upload_gate", gate):
        yield TestClient(app)
    limiter.reset()


@pytest.fixture
def s3_client():
    """Provide a mocked S3 client with a test bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name=settings.AWS_REGION)
        client.create_bucket(Bucket=settings.MEDIA_BUCKET)
        yield client
