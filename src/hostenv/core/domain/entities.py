from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union


class XdgCategory(str, Enum):
    DATA_HOME = "data-home"
    CONFIG_HOME = "config-home"
    STATE_HOME = "state-home"
    CACHE_HOME = "cache-home"
    DATA_DIRS = "data-dirs"
    CONFIG_DIRS = "config-dirs"


ResolvedValue = Union[str, List[str]]


@dataclass
class PathsReport:
    platform: str
    paths: Dict[str, ResolvedValue] = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {"platform": self.platform, "paths": dict(self.paths)}


@dataclass
class OpenUrlReport:
    url: str
    platform: str
    argv: List[str]
    timeout_ms: int
    launched: bool
    pid: Optional[int] = None
    dry_run: bool = False
    returncode: Optional[int] = None

    def as_dict(self) -> dict:
        return {
            "url": self.url,
            "platform": self.platform,
            "argv": list(self.argv),
            "timeout_ms": self.timeout_ms,
            "launched": self.launched,
            "pid": self.pid,
            "dry_run": self.dry_run,
            "returncode": self.returncode,
        }
