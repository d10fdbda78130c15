"""XDG base directory lookups.

Every function is a pure computation over an environment mapping (defaulting
to ``os.environ``) and a platform. Nothing here touches the filesystem: no
existence checks, no ``~`` expansion, no normalization.

Defaults:
- XDG_DATA_HOME: $HOME/.local/share
- XDG_CONFIG_HOME: $HOME/.config
- XDG_STATE_HOME: $HOME/.local/state
- XDG_CACHE_HOME: $HOME/.cache
- XDG_DATA_DIRS: /usr/local/share:/usr/share
- XDG_CONFIG_DIRS: /etc/xdg
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from hostenv.core.domain.entities import ResolvedValue, XdgCategory
from hostenv.core.services.error_codes import ErrorCode, HomeDirectoryError, HostenvError
from hostenv.core.services.platform import Platform, current_platform

DEFAULT_DATA_DIRS: Tuple[str, ...] = ("/usr/local/share", "/usr/share")
DEFAULT_CONFIG_DIRS: Tuple[str, ...] = ("/etc/xdg",)

_HOME_FALLBACKS = {
    "XDG_DATA_HOME": ".local/share",
    "XDG_CONFIG_HOME": ".config",
    "XDG_STATE_HOME": ".local/state",
    "XDG_CACHE_HOME": ".cache",
}


def resolve_env(env: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if env is None else env


def path_separator(platform: Optional[Platform] = None) -> str:
    return "\\" if current_platform(platform) is Platform.WINDOWS else "/"


def home_directory(
    env: Optional[Mapping[str, str]] = None, platform: Optional[Platform] = None
) -> str:
    """
    Return $HOME, or %USERPROFILE% on Windows when HOME is unset.

    Raises:
        HomeDirectoryError: neither variable is available.
    """
    env = resolve_env(env)
    home = env.get("HOME")
    if home:
        return home
    if current_platform(platform) is Platform.WINDOWS:
        profile = env.get("USERPROFILE")
        if profile:
            return profile
    raise HomeDirectoryError(details={"platform": current_platform(platform).value})


def _home_path(
    variable: str,
    env: Optional[Mapping[str, str]],
    platform: Optional[Platform],
) -> str:
    env = resolve_env(env)
    value = env.get(variable)
    if value:
        return value
    home = home_directory(env, platform)
    return home + path_separator(platform) + _HOME_FALLBACKS[variable]


def _dir_list(variable: str, defaults: Tuple[str, ...], env: Optional[Mapping[str, str]]) -> List[str]:
    value = resolve_env(env).get(variable)
    if value:
        # Plain split: "/a::/b" keeps the empty middle segment.
        return value.split(":")
    return list(defaults)


def data_home(env: Optional[Mapping[str, str]] = None, platform: Optional[Platform] = None) -> str:
    return _home_path("XDG_DATA_HOME", env, platform)


def config_home(env: Optional[Mapping[str, str]] = None, platform: Optional[Platform] = None) -> str:
    return _home_path("XDG_CONFIG_HOME", env, platform)


def state_home(env: Optional[Mapping[str, str]] = None, platform: Optional[Platform] = None) -> str:
    return _home_path("XDG_STATE_HOME", env, platform)


def cache_home(env: Optional[Mapping[str, str]] = None, platform: Optional[Platform] = None) -> str:
    return _home_path("XDG_CACHE_HOME", env, platform)


def data_dirs(env: Optional[Mapping[str, str]] = None) -> List[str]:
    """XDG_DATA_DIRS split on ":"; an unset or empty variable gives the defaults, but "/a::/b" keeps its empty segment."""
    return _dir_list("XDG_DATA_DIRS", DEFAULT_DATA_DIRS, env)


def config_dirs(env: Optional[Mapping[str, str]] = None) -> List[str]:
    """XDG_CONFIG_DIRS split on ":"; an unset or empty variable gives the defaults, but "/a::/b" keeps its empty segment."""
    return _dir_list("XDG_CONFIG_DIRS", DEFAULT_CONFIG_DIRS, env)


def resolve(
    category: XdgCategory | str,
    env: Optional[Mapping[str, str]] = None,
    platform: Optional[Platform] = None,
) -> ResolvedValue:
    """Resolve a single category by its enum member or its name ("config-home")."""
    try:
        category = XdgCategory(category)
    except ValueError as exc:
        raise HostenvError(
            code=ErrorCode.UNKNOWN_CATEGORY,
            message=f"Unknown XDG category: {category}",
            details={"valid_categories": [c.value for c in XdgCategory]},
        ) from exc

    if category is XdgCategory.DATA_HOME:
        return data_home(env, platform)
    if category is XdgCategory.CONFIG_HOME:
        return config_home(env, platform)
    if category is XdgCategory.STATE_HOME:
        return state_home(env, platform)
    if category is XdgCategory.CACHE_HOME:
        return cache_home(env, platform)
    if category is XdgCategory.DATA_DIRS:
        return data_dirs(env)
    return config_dirs(env)


@dataclass(frozen=True)
class XdgPaths:
    data_home: str
    config_home: str
    state_home: str
    cache_home: str
    data_dirs: Tuple[str, ...]
    config_dirs: Tuple[str, ...]

    def as_dict(self) -> dict:
        return {
            XdgCategory.DATA_HOME.value: self.data_home,
            XdgCategory.CONFIG_HOME.value: self.config_home,
            XdgCategory.STATE_HOME.value: self.state_home,
            XdgCategory.CACHE_HOME.value: self.cache_home,
            XdgCategory.DATA_DIRS.value: list(self.data_dirs),
            XdgCategory.CONFIG_DIRS.value: list(self.config_dirs),
        }


def get_xdg_paths(
    env: Optional[Mapping[str, str]] = None, platform: Optional[Platform] = None
) -> XdgPaths:
    """Resolve all six XDG values at once. Raises HomeDirectoryError like the single lookups."""
    return XdgPaths(
        data_home=data_home(env, platform),
        config_home=config_home(env, platform),
        state_home=state_home(env, platform),
        cache_home=cache_home(env, platform),
        data_dirs=tuple(data_dirs(env)),
        config_dirs=tuple(config_dirs(env)),
    )
