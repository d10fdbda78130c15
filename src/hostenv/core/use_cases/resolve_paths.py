from __future__ import annotations

from typing import Mapping, Optional

from hostenv.core.domain.entities import PathsReport, XdgCategory
from hostenv.core.services import xdg_paths
from hostenv.core.services.platform import Platform, current_platform


class ResolvePathsUseCase:
    def __init__(self, env: Optional[Mapping[str, str]] = None, platform: Optional[Platform] = None):
        self._env = env
        self._platform = current_platform(platform)

    def execute(self, category: XdgCategory | str | None = None) -> PathsReport:
        """Resolve one category, or all six when ``category`` is None."""
        report = PathsReport(platform=self._platform.value)
        if category is not None:
            value = xdg_paths.resolve(category, env=self._env, platform=self._platform)
            report.paths[XdgCategory(category).value] = value
            return report

        report.paths.update(xdg_paths.get_xdg_paths(env=self._env, platform=self._platform).as_dict())
        return report
