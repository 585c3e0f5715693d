import asyncio
import re

from conftest import MIB, StubUploader, image_bytes
from limits.storage import MemoryStorage

from photodrop.models.upload import FailureReason, GateState, UploadRequest
from photodrop.services.gate import UploadGate
from photodrop.services.media import MediaUploadError
from photodrop.services.quota import LimitsQuotaStore, QuotaTracker


def png_request(prenom="Marie", size=None):
    return UploadRequest(prenom=prenom, data=image_bytes("PNG", size=size), content_type="image/png")


def submit(gate, identity, request):
    return asyncio.run(gate.submit(identity, request))


def test_successful_upload_scenario(gate, uploader, tracker):
    result = submit(gate, "1.2.3.4", png_request("Marie É!!", size=2 * MIB))

    assert result.state is GateState.SUCCEEDED
    assert result.ok is True
    assert re.fullmatch(r"Marie_É_\d+", result.public_id)
    assert result.url == f"https://media.example.com/uploads/{result.public_id}.png"
    assert tracker.current_count("1.2.3.4") == 1


def test_descriptor_sent_to_uploader(tracker, uploader):
    gate = UploadGate(tracker=tracker, uploader=uploader, folder="contest", timestamp=lambda: 1717243200)
    submit(gate, "1.2.3.4", png_request("Jean Pierre"))

    data, descriptor = uploader.calls[0]
    assert data.startswith(b"\x89PNG")
    assert descriptor.folder == "contest"
    assert descriptor.public_id == "Jean_Pierre_1717243200"
    assert descriptor.resource_type == "image"
    assert descriptor.fetch_format == "auto"
    assert descriptor.quality == "auto"
    assert descriptor.content_type == "image/png"


def test_fourth_attempt_fails_without_calling_uploader(gate, uploader, tracker):
    for _ in range(3):
        assert submit(gate, "1.2.3.4", png_request()).ok

    result = submit(gate, "1.2.3.4", png_request())

    assert result.state is GateState.FAILED
    assert result.reason is FailureReason.QUOTA_EXCEEDED
    assert result.reason.status_code == 429
    assert len(uploader.calls) == 3
    assert tracker.current_count("1.2.3.4") == 3


def test_quota_exceeded_skips_validation(gate, uploader, tracker):
    for _ in range(3):
        tracker.increment("1.2.3.4")

    result = submit(gate, "1.2.3.4", UploadRequest(prenom="", data=None))

    assert result.reason is FailureReason.QUOTA_EXCEEDED
    assert uploader.calls == []


def test_quota_resets_next_day(gate, tracker, clock):
    for _ in range(3):
        tracker.increment("1.2.3.4")
    assert gate.quota_exceeded("1.2.3.4") is True

    clock.advance(days=1)

    assert gate.quota_exceeded("1.2.3.4") is False
    assert submit(gate, "1.2.3.4", png_request()).ok


def test_failed_upload_does_not_count(tracker):
    uploader = StubUploader(error=MediaUploadError("boom"))
    gate = UploadGate(tracker=tracker, uploader=uploader)

    result = submit(gate, "1.2.3.4", png_request())

    assert result.reason is FailureReason.UPLOAD_ERROR
    assert len(uploader.calls) == 1
    assert tracker.current_count("1.2.3.4") == 0


def test_unexpected_uploader_exception_maps_to_upload_error(tracker):
    gate = UploadGate(tracker=tracker, uploader=StubUploader(error=RuntimeError("kaboom")))

    result = submit(gate, "1.2.3.4", png_request())

    assert result.reason is FailureReason.UPLOAD_ERROR
    assert tracker.current_count("1.2.3.4") == 0


def test_upload_timeout_maps_to_upload_error(tracker):
    gate = UploadGate(tracker=tracker, uploader=StubUploader(delay=0.5), timeout=0.05)

    result = submit(gate, "1.2.3.4", png_request())

    assert result.reason is FailureReason.UPLOAD_ERROR
    assert tracker.current_count("1.2.3.4") == 0


def test_invalid_input_is_not_uploaded(gate, uploader):
    result = submit(gate, "1.2.3.4", UploadRequest(prenom="", data=image_bytes("PNG"), content_type="image/png"))

    assert result.reason is FailureReason.INVALID_INPUT
    assert uploader.calls == []


def test_pdf_is_rejected(gate, uploader):
    request = UploadRequest(prenom="Marie", data=b"%PDF-1.4", content_type="application/pdf")

    result = submit(gate, "1.2.3.4", request)

    assert result.reason is FailureReason.FORMAT_NOT_ALLOWED
    assert uploader.calls == []


def test_oversized_file_is_rejected(gate, uploader, tracker):
    result = submit(gate, "1.2.3.4", png_request(size=11 * MIB))

    assert result.reason is FailureReason.FILE_TOO_LARGE
    assert uploader.calls == []
    assert tracker.current_count("1.2.3.4") == 0


def test_empty_sanitized_name_is_still_uploaded(gate):
    result = submit(gate, "1.2.3.4", png_request("!!!"))

    assert result.ok
    assert re.fullmatch(r"_\d+", result.public_id)


def _race(gate):
    async def both():
        return await asyncio.gather(
            gate.submit("1.2.3.4", png_request()),
            gate.submit("1.2.3.4", png_request()),
        )
    return asyncio.run(both())


def test_concurrent_same_identity_can_over_admit_by_default(clock):
    tracker = QuotaTracker(store=LimitsQuotaStore(MemoryStorage()), limit=1, clock=clock)
    gate = UploadGate(tracker=tracker, uploader=StubUploader(delay=0.1), strict=False)

    results = _race(gate)

    assert [r.ok for r in results] == [True, True]
    assert tracker.current_count("1.2.3.4") == 2


def test_strict_mode_serializes_same_identity(clock):
    tracker = QuotaTracker(store=LimitsQuotaStore(MemoryStorage()), limit=1, clock=clock)
    uploader = StubUploader(delay=0.1)
    gate = UploadGate(tracker=tracker, uploader=uploader, strict=True)

    results = _race(gate)

    assert sorted(r.state.value for r in results) == ["failed", "succeeded"]
    assert [r.reason for r in results if not r.ok] == [FailureReason.QUOTA_EXCEEDED]
    assert len(uploader.calls) == 1
    assert tracker.current_count("1.2.3.4") == 1


def test_strict_mode_releases_lock_after_failure(tracker):
    gate = UploadGate(tracker=tracker, uploader=StubUploader(error=MediaUploadError("boom")), strict=True)

    assert submit(gate, "1.2.3.4", png_request()).reason is FailureReason.UPLOAD_ERROR
    gate.uploader = StubUploader()
    assert submit(gate, "1.2.3.4", png_request()).ok
