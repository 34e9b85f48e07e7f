import pytest

from fakes import FakeApiClient, ManualClock, RecordingNotifications


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def notifications(clock) -> RecordingNotifications:
    return RecordingNotifications(clock, auto_dismiss_ms=5000)


@pytest.fixture()
def api() -> FakeApiClient:
    return FakeApiClient()
