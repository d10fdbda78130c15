from __future__ import annotations

from typing import Optional

from hostenv.core.domain.entities import OpenUrlReport
from hostenv.core.services.app_config import AppConfig, BrowserSettings
from hostenv.core.services.browser import build_argv, launch_supervised
from hostenv.core.services.error_codes import ErrorCode, HostenvError
from hostenv.core.services.platform import Platform, current_platform


class OpenUrlUseCase:
    """Open a URL and report the outcome.

    The library-level ``open_browser`` swallows every failure. The CLI wants
    to tell the user when nothing happened, so this use case drives
    ``launch_supervised`` directly and lets HostenvError propagate.
    """

    def __init__(self, config: Optional[AppConfig] = None, platform: Optional[Platform] = None):
        self._settings = config.browser if config is not None else BrowserSettings()
        self._platform = current_platform(platform)

    def execute(
        self,
        url: str,
        timeout_ms: Optional[int] = None,
        dry_run: bool = False,
        wait: bool = False,
    ) -> OpenUrlReport:
        if not url:
            raise HostenvError(code=ErrorCode.INVALID_ARGUMENT, message="URL must not be empty")

        timeout = self._settings.timeout_ms if timeout_ms is None else timeout_ms
        argv = build_argv(url, platform=self._platform, command=self._settings.command or None)
        report = OpenUrlReport(
            url=url,
            platform=self._platform.value,
            argv=argv,
            timeout_ms=timeout,
            launched=False,
            dry_run=dry_run,
        )
        if dry_run:
            return report

        supervised = launch_supervised(argv, timeout_ms=timeout)
        report.launched = True
        report.pid = supervised.pid
        if wait:
            report.returncode = supervised.join()
        return report
