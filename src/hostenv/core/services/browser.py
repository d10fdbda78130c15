"""Open a URL in the platform's default browser.

``open_browser`` is fire-and-forget: it spawns the platform opener, hands the
child's lifetime to three daemon threads, and returns. It never raises; the
caller cannot tell a launched browser from a silently failed attempt. Enable
HOSTENV_DEBUG=1 to see what happened on stderr.

Supervision of each child:
- stdin is closed immediately (nothing is ever sent)
- stdout and stderr are drained so the child never blocks on a full pipe
- the supervisor waits ``timeout_ms``, then sends SIGTERM, waits
  TERMINATE_GRACE_MS more, then sends SIGKILL
- once the child is reaped, the drains get DRAIN_GRACE_MS to reach EOF and
  are then stopped, even if a process the opener started still holds the
  pipes (POSIX only; on Windows such a drain stays detached)
"""

from __future__ import annotations

import os
import selectors
import subprocess
import threading
from dataclasses import dataclass
from typing import IO, List, Optional, Sequence, Tuple

from hostenv.core.services.error_codes import ErrorCode, HostenvError
from hostenv.core.services.observability import log_debug
from hostenv.core.services.platform import Platform, current_platform

DEFAULT_TIMEOUT_MS = 20_000
TERMINATE_GRACE_MS = 1_000
DRAIN_GRACE_MS = 500

_DRAIN_CHUNK = 8192
_DRAIN_POLL_S = 0.1


def escape_windows_url(url: str) -> str:
    """Escape ``&`` for the ``start`` builtin. No other character is touched."""
    return url.replace("&", "^&")


def opener_command(url: str, platform: Optional[Platform] = None) -> Tuple[str, List[str]]:
    """
    Return (command, args) that open ``url`` on the given platform.

    Raises:
        HostenvError: UNSUPPORTED_PLATFORM for anything outside Linux/macOS/Windows.
    """
    platform = current_platform(platform)
    if platform is Platform.LINUX:
        return "xdg-open", [url]
    if platform is Platform.MACOS:
        return "open", [url]
    if platform is Platform.WINDOWS:
        return "cmd", ["/c", "start", escape_windows_url(url)]
    raise HostenvError(
        code=ErrorCode.UNSUPPORTED_PLATFORM,
        message=f"Opening a browser is not supported on platform '{platform.value}'",
        details={"platform": platform.value},
    )


def build_argv(
    url: str,
    platform: Optional[Platform] = None,
    command: Optional[Sequence[str]] = None,
) -> List[str]:
    """Full argv for opening ``url``; ``command`` replaces the platform opener and gets the URL appended."""
    if command:
        return [*command, url]
    cmd, args = opener_command(url, platform)
    return [cmd, *args]


@dataclass
class SupervisedProcess:
    process: subprocess.Popen
    supervisor: threading.Thread
    drains: Tuple[threading.Thread, ...]

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def threads(self) -> Tuple[threading.Thread, ...]:
        return (*self.drains, self.supervisor)

    def join(self, timeout: Optional[float] = None) -> Optional[int]:
        """
        Wait for the supervisor, then briefly for the drains.

        The supervisor is bounded by the timeouts. A drain is bounded too on
        POSIX, but on Windows it may outlive the child when a grandchild (the
        browser itself) inherited the pipe; it stays detached in that case.
        Returns the child's exit status if it has been reaped.
        """
        self.supervisor.join(timeout)
        for thread in self.drains:
            thread.join(DRAIN_GRACE_MS / 1000)
        return self.process.returncode


def _drain_blocking(stream: IO[bytes]) -> None:
    while stream.read(_DRAIN_CHUNK):
        pass


def _drain_until_stopped(stream: IO[bytes], stop: threading.Event) -> None:
    fd = stream.fileno()
    with selectors.DefaultSelector() as selector:
        selector.register(fd, selectors.EVENT_READ)
        while not stop.is_set():
            if selector.select(timeout=_DRAIN_POLL_S) and not os.read(fd, _DRAIN_CHUNK):
                return


def _drain(stream: IO[bytes], pid: int, name: str, stop: threading.Event) -> None:
    try:
        with stream:
            if os.name == "nt":
                # select() only handles sockets on Windows.
                _drain_blocking(stream)
            else:
                _drain_until_stopped(stream, stop)
    except Exception as exc:
        log_debug(
            operation="browser.drain_failed",
            details={"pid": pid, "stream": name, "reason": str(exc)},
        )


def _signal(process: subprocess.Popen, action: str) -> None:
    try:
        if action == "terminate":
            process.terminate()
        else:
            process.kill()
    except OSError as exc:
        log_debug(
            operation=f"browser.{action}_failed",
            details={"pid": process.pid, "reason": str(exc)},
        )


def _wait_for_exit(process: subprocess.Popen, timeout_ms: int, grace_ms: int) -> None:
    try:
        process.wait(timeout=timeout_ms / 1000)
        log_debug(
            operation="browser.exited",
            details={"pid": process.pid, "returncode": process.returncode},
        )
        return
    except subprocess.TimeoutExpired:
        pass

    log_debug(operation="browser.terminate", details={"pid": process.pid, "timeout_ms": timeout_ms})
    _signal(process, "terminate")
    try:
        process.wait(timeout=grace_ms / 1000)
        return
    except subprocess.TimeoutExpired:
        pass

    log_debug(operation="browser.kill", details={"pid": process.pid, "grace_ms": grace_ms})
    _signal(process, "kill")
    process.wait()


def _supervise(
    process: subprocess.Popen,
    timeout_ms: int,
    grace_ms: int,
    drains: Tuple[threading.Thread, ...],
    stop: threading.Event,
) -> None:
    try:
        _wait_for_exit(process, timeout_ms, grace_ms)
    except Exception as exc:
        log_debug(
            operation="browser.supervise_failed",
            details={"pid": process.pid, "reason": str(exc)},
        )
    finally:
        # A process started by the opener can keep the pipes open long after
        # the opener itself is gone; stop reading once the leftovers are in.
        for thread in drains:
            thread.join(DRAIN_GRACE_MS / 1000)
        stop.set()


def launch_supervised(
    argv: Sequence[str],
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    grace_ms: int = TERMINATE_GRACE_MS,
) -> SupervisedProcess:
    """
    Spawn ``argv`` and supervise it from background daemon threads.

    Returns as soon as the child is spawned. Unlike ``open_browser`` this
    raises, so callers that need to report a failed launch can do so.

    Raises:
        HostenvError: INVALID_ARGUMENT for an empty argv or negative timeouts,
                      LAUNCH_FAILED when the process cannot be spawned.
    """
    if not argv:
        raise HostenvError(code=ErrorCode.INVALID_ARGUMENT, message="Cannot launch an empty command")
    if timeout_ms < 0 or grace_ms < 0:
        raise HostenvError(
            code=ErrorCode.INVALID_ARGUMENT,
            message="Timeouts must not be negative",
            details={"timeout_ms": timeout_ms, "grace_ms": grace_ms},
        )

    try:
        process = subprocess.Popen(
            list(argv),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise HostenvError(
            code=ErrorCode.LAUNCH_FAILED,
            message=f"Failed to launch '{argv[0]}': {exc}",
            details={"argv": list(argv)},
        ) from exc

    try:
        process.stdin.close()
    except OSError:
        pass

    stop = threading.Event()
    drains = (
        threading.Thread(
            target=_drain,
            args=(process.stdout, process.pid, "stdout", stop),
            name=f"hostenv-drain-stdout-{process.pid}",
            daemon=True,
        ),
        threading.Thread(
            target=_drain,
            args=(process.stderr, process.pid, "stderr", stop),
            name=f"hostenv-drain-stderr-{process.pid}",
            daemon=True,
        ),
    )
    supervisor = threading.Thread(
        target=_supervise,
        args=(process, timeout_ms, grace_ms, drains, stop),
        name=f"hostenv-supervise-{process.pid}",
        daemon=True,
    )
    for thread in (*drains, supervisor):
        thread.start()

    log_debug(
        operation="browser.spawned",
        details={"argv": list(argv), "pid": process.pid, "timeout_ms": timeout_ms},
    )
    return SupervisedProcess(process=process, supervisor=supervisor, drains=drains)


def open_browser(
    url: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    *,
    platform: Optional[Platform] = None,
    command: Optional[Sequence[str]] = None,
) -> None:
    """
    Try to open ``url`` in the default browser. Best effort: never raises.

    Args:
        url: The URL to open.
        timeout_ms: How long the opener may run before it is terminated.
        platform: Override the detected platform.
        command: Use this argv prefix instead of the platform opener.
    """
    try:
        launch_supervised(build_argv(url, platform=platform, command=command), timeout_ms)
    except Exception as exc:
        error_code = exc.code.value if isinstance(exc, HostenvError) else ErrorCode.UNKNOWN_ERROR.value
        log_debug(
            operation="browser.open_failed",
            details={"url": url, "error_code": error_code, "reason": str(exc)},
        )
