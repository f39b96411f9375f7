"""
Global test configuration and fixtures
"""

import time

import pytest

from lazybuild import LazyBuilder, Snapshot

# slow test thresholds (seconds)
SLOW_TEST_THRESHOLD = 5.0
WARNING_TEST_THRESHOLD = 2.0


@pytest.fixture(autouse=True)
def track_test_duration(request):
    """Warn about slow tests"""
    start_time = time.time()

    yield

    duration = time.time() - start_time
    test_name = request.node.nodeid

    if duration > SLOW_TEST_THRESHOLD:
        print(f"\n⚠️  SLOW TEST ({duration:.2f}s): {test_name}")
    elif duration > WARNING_TEST_THRESHOLD:
        print(f"\n⏱️  Slow ({duration:.2f}s): {test_name}")


class CallLog:
    """Records every (build_path, content) the transform is called with."""

    def __init__(self):
        self.calls: list[tuple[str, bytes]] = []

    def record(self, build_path: str, content: bytes) -> None:
        self.calls.append((build_path, content))

    @property
    def paths(self) -> list[str]:
        return sorted(path for path, _ in self.calls)

    def clear(self) -> None:
        self.calls.clear()


@pytest.fixture
def call_log() -> CallLog:
    return CallLog()


@pytest.fixture
def banner_builder(call_log) -> LazyBuilder:
    """
    banner.txt produces nothing; every other file is prefixed with the banner.
    """

    def transform(build_path, content, ctx):
        call_log.record(build_path, content)
        if build_path == "banner.txt":
            return None
        banner = ctx.import_file("banner.txt")
        return {build_path: b"/* " + banner + b" */\n" + content}

    return LazyBuilder(transform)


@pytest.fixture
def script_builder(call_log) -> LazyBuilder:
    """
    .js files get a banner and an extra uppercase copy, banner.txt is dropped,
    everything else is copied through.
    """

    def transform(build_path, content, ctx):
        call_log.record(build_path, content)
        if build_path == "banner.txt":
            return None

        if build_path.endswith(".js"):
            banner = ctx.import_file("banner.txt").decode()
            return {
                build_path: f"/* {banner} */\n{content.decode()}",
                f"{build_path}.uppercase": content.decode().upper(),
            }

        return content

    return LazyBuilder(transform)


@pytest.fixture
def texts():
    """Snapshot → {path: str} for readable assertions."""

    def simplify(snapshot: Snapshot) -> dict[str, str]:
        return snapshot.to_texts()

    return simplify


# Pytest hooks
def pytest_configure(config):
    """pytest configuration"""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (medium speed)")


def pytest_collection_modifyitems(config, items):
    """Path based markers"""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
