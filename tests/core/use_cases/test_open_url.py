import sys
from unittest.mock import MagicMock, patch

import pytest

from hostenv.core.services.app_config import AppConfig, BrowserSettings
from hostenv.core.services.error_codes import ErrorCode, HostenvError
from hostenv.core.services.platform import Platform
from hostenv.core.use_cases.open_url import OpenUrlUseCase


def _config(**browser) -> AppConfig:
    return AppConfig(source=None, browser=BrowserSettings(**browser))


def test_dry_run_reports_platform_command():
    report = OpenUrlUseCase(platform=Platform.WINDOWS).execute("http://x/?a&b", dry_run=True)
    assert report.argv == ["cmd", "/c", "start", "http://x/?a^&b"]
    assert report.launched is False
    assert report.pid is None
    assert report.timeout_ms == 20_000


def test_config_supplies_command_and_timeout():
    use_case = OpenUrlUseCase(config=_config(timeout_ms=500, command=("firefox",)), platform=Platform.OTHER)
    report = use_case.execute("http://x", dry_run=True)
    assert report.argv == ["firefox", "http://x"]
    assert report.timeout_ms == 500


def test_explicit_timeout_overrides_config():
    use_case = OpenUrlUseCase(config=_config(timeout_ms=500), platform=Platform.LINUX)
    assert use_case.execute("http://x", timeout_ms=0, dry_run=True).timeout_ms == 0


def test_unsupported_platform_raises():
    with pytest.raises(HostenvError) as exc_info:
        OpenUrlUseCase(platform=Platform.OTHER).execute("http://x")
    assert exc_info.value.code == ErrorCode.UNSUPPORTED_PLATFORM


def test_empty_url_rejected():
    with pytest.raises(HostenvError) as exc_info:
        OpenUrlUseCase(platform=Platform.LINUX).execute("")
    assert exc_info.value.code == ErrorCode.INVALID_ARGUMENT


def test_missing_opener_raises_launch_failed():
    use_case = OpenUrlUseCase(config=_config(command=("hostenv-no-such-opener-binary",)))
    with pytest.raises(HostenvError) as exc_info:
        use_case.execute("http://x")
    assert exc_info.value.code == ErrorCode.LAUNCH_FAILED


@patch("hostenv.core.use_cases.open_url.launch_supervised")
def test_launch_reports_pid(mock_launch):
    mock_launch.return_value = MagicMock(pid=321)
    report = OpenUrlUseCase(platform=Platform.MACOS).execute("http://x", timeout_ms=50)
    mock_launch.assert_called_once_with(["open", "http://x"], timeout_ms=50)
    assert report.launched is True
    assert report.pid == 321
    assert report.returncode is None


def test_wait_collects_return_code():
    command = (sys.executable, "-c", "import sys; sys.exit(len(sys.argv))")
    report = OpenUrlUseCase(config=_config(command=command)).execute("http://x", wait=True)
    # argv inside the child is ["-c", "http://x"]
    assert report.returncode == 2
