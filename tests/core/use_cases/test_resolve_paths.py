import pytest

from hostenv.core.domain.entities import XdgCategory
from hostenv.core.services.error_codes import ErrorCode, HostenvError
from hostenv.core.services.platform import Platform
from hostenv.core.use_cases.resolve_paths import ResolvePathsUseCase


def test_all_categories_in_order():
    report = ResolvePathsUseCase(env={"HOME": "/home/u"}, platform=Platform.LINUX).execute()
    assert report.platform == "linux"
    assert list(report.paths) == [c.value for c in XdgCategory]
    assert report.paths["config-home"] == "/home/u/.config"


def test_single_category():
    use_case = ResolvePathsUseCase(env={"XDG_CONFIG_DIRS": "/a::/b"}, platform=Platform.LINUX)
    report = use_case.execute("config-dirs")
    assert report.as_dict() == {"platform": "linux", "paths": {"config-dirs": ["/a", "", "/b"]}}


def test_single_category_does_not_need_home_for_lists():
    report = ResolvePathsUseCase(env={}, platform=Platform.LINUX).execute(XdgCategory.DATA_DIRS)
    assert report.paths == {"data-dirs": ["/usr/local/share", "/usr/share"]}


def test_missing_home_propagates():
    with pytest.raises(HostenvError) as exc_info:
        ResolvePathsUseCase(env={}, platform=Platform.MACOS).execute()
    assert exc_info.value.code == ErrorCode.HOME_NOT_FOUND


def test_unknown_category():
    with pytest.raises(HostenvError) as exc_info:
        ResolvePathsUseCase(env={"HOME": "/h"}).execute("runtime-dir")
    assert exc_info.value.code == ErrorCode.UNKNOWN_CATEGORY
