"""Best-effort sensory cues (sound, bell, vibration) for new live notifications."""

from __future__ import annotations

import asyncio
import logging
import shutil
import sys
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Protocol, Sequence

from anyio import from_thread

from alertsync.domain.entities import Notification

logger = logging.getLogger(__name__)


class AlertCapability(Protocol):
    """A platform specific way of catching the operator's attention."""

    async def alert(self, notification: Notification) -> None:
        ...


class AudioCueCapability:
    """Play a short sound file through an external player (``paplay``, ``afplay``...)."""

    def __init__(self, sound_path: str | Path, *, player: str = "paplay") -> None:
        self.sound_path = Path(sound_path)
        self.player = player

    async def alert(self, notification: Notification) -> None:
        executable = shutil.which(self.player)
        if executable is None:
            raise FileNotFoundError(f"Audio player '{self.player}' is not available")
        if not self.sound_path.is_file():
            raise FileNotFoundError(f"Alert sound '{self.sound_path}' does not exist")

        process = await asyncio.create_subprocess_exec(
            executable,
            str(self.sound_path),
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        try:
            await process.wait()
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
            raise


class BellCapability:
    """Ring the terminal bell."""

    def __init__(self, stream=None) -> None:
        self._stream = stream

    async def alert(self, notification: Notification) -> None:
        stream = self._stream or sys.stderr
        stream.write("\a")
        stream.flush()


class HapticCapability:
    """Forward a vibration request to a host-provided device hook."""

    def __init__(
        self, vibrate: Callable[[int], Awaitable[None] | None], *, duration_ms: int = 200
    ) -> None:
        self._vibrate = vibrate
        self.duration_ms = duration_ms

    async def alert(self, notification: Notification) -> None:
        result = self._vibrate(self.duration_ms)
        if result is not None:
            await result


class AlertDispatcher:
    """Fire-and-forget fan-out of a notification to every capability.

    Failures of a capability are swallowed; the caller is never delayed by a
    cue nor affected by its outcome.
    """

    def __init__(self, capabilities: Iterable[AlertCapability] = ()) -> None:
        self._capabilities: Sequence[AlertCapability] = tuple(capabilities)
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def capabilities(self) -> Sequence[AlertCapability]:
        return self._capabilities

    def dispatch(self, notification: Notification) -> None:
        for capability in self._capabilities:
            try:
                self._schedule(capability, notification)
            except Exception:
                logger.debug("Could not schedule alert %r", capability, exc_info=True)

    async def aclose(self) -> None:
        """Cancel the cues still running and wait for them to finish."""

        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _schedule(self, capability: AlertCapability, notification: Notification) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Called from a worker thread: spawn the cue on the event loop.
            from_thread.run_sync(self._spawn, capability, notification)
        else:
            self._spawn(capability, notification)

    def _spawn(self, capability: AlertCapability, notification: Notification) -> None:
        task = asyncio.get_running_loop().create_task(self._run(capability, notification))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @staticmethod
    async def _run(capability: AlertCapability, notification: Notification) -> None:
        try:
            await capability.alert(notification)
        except Exception:
            logger.debug("Alert %r failed for notification %s", capability, notification.id, exc_info=True)


def build_alert_dispatcher(
    *,
    sound_path: str | None = None,
    player: str = "paplay",
    bell: bool = False,
    vibrate: Callable[[int], Awaitable[None] | None] | None = None,
) -> AlertDispatcher:
    """Assemble the dispatcher from configuration values."""

    capabilities: list[AlertCapability] = []
    if sound_path:
        capabilities.append(AudioCueCapability(sound_path, player=player))
    if bell:
        capabilities.append(BellCapability())
    if vibrate is not None:
        capabilities.append(HapticCapability(vibrate))
    return AlertDispatcher(capabilities)


__all__ = [
    "AlertCapability",
    "AlertDispatcher",
    "AudioCueCapability",
    "BellCapability",
    "HapticCapability",
    "build_alert_dispatcher",
]
