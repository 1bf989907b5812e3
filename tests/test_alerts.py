"""Tests for the fire-and-forget alert dispatcher."""

from __future__ import annotations

import asyncio
import io
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from alertsync.config import Settings
from alertsync.infrastructure.alerts import (
    AlertDispatcher,
    AudioCueCapability,
    BellCapability,
    HapticCapability,
    build_alert_dispatcher,
)
from alertsync.infrastructure.bootstrap import build_runtime
from fakes import FakeApi, InMemoryStorage, TransportPool, make_notification, settle


class _Recorder:
    def __init__(self) -> None:
        self.seen: list[int | None] = []

    async def alert(self, notification) -> None:
        self.seen.append(notification.id)


class _Broken:
    async def alert(self, notification) -> None:
        raise RuntimeError("no audio device")


@pytest.mark.anyio
async def test_dispatch_runs_every_capability_and_swallows_failures() -> None:
    recorder = _Recorder()
    dispatcher = AlertDispatcher([_Broken(), recorder])

    dispatcher.dispatch(make_notification(4))
    await settle()

    assert recorder.seen == [4]


@pytest.mark.anyio
async def test_haptic_capability_requests_configured_duration() -> None:
    durations: list[int] = []
    dispatcher = AlertDispatcher([HapticCapability(durations.append)])

    dispatcher.dispatch(make_notification(1))
    await settle()

    assert durations == [200]


@pytest.mark.anyio
async def test_bell_capability_writes_bell_character() -> None:
    stream = io.StringIO()

    await BellCapability(stream).alert(make_notification(1))

    assert stream.getvalue() == "\a"


@pytest.mark.anyio
async def test_audio_cue_requires_existing_player(tmp_path) -> None:
    capability = AudioCueCapability(tmp_path / "alert.mp3", player="definitely-not-a-player")

    with pytest.raises(FileNotFoundError):
        await capability.alert(make_notification(1))


def test_dispatch_without_event_loop_does_not_raise() -> None:
    recorder = _Recorder()

    AlertDispatcher([recorder]).dispatch(make_notification(1))

    assert recorder.seen == []


def test_build_alert_dispatcher_from_settings_values(tmp_path) -> None:
    dispatcher = build_alert_dispatcher(
        sound_path=str(tmp_path / "alert.mp3"), bell=True, vibrate=lambda ms: None
    )

    kinds = [type(capability) for capability in dispatcher.capabilities]
    assert kinds == [AudioCueCapability, BellCapability, HapticCapability]
    assert build_alert_dispatcher().capabilities == ()


@pytest.mark.anyio
async def test_aclose_cancels_cues_still_running() -> None:
    started = asyncio.Event()
    cancelled: list[int | None] = []

    class _Slow:
        async def alert(self, notification) -> None:
            started.set()
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                cancelled.append(notification.id)
                raise

    dispatcher = AlertDispatcher([_Slow()])
    dispatcher.dispatch(make_notification(5))
    await started.wait()

    await asyncio.wait_for(dispatcher.aclose(), timeout=1)

    assert cancelled == [5]
    await dispatcher.aclose()


@pytest.mark.anyio
async def test_runtime_shutdown_closes_alert_dispatcher() -> None:
    closed: list[bool] = []

    class _ClosingDispatcher(AlertDispatcher):
        async def aclose(self) -> None:
            closed.append(True)
            await super().aclose()

    runtime = build_runtime(
        Settings(),
        storage=InMemoryStorage(),
        api=FakeApi(),
        transport_factory=TransportPool(),
        alerts=_ClosingDispatcher(),
    )

    await runtime.aclose()

    assert closed == [True]
