"""Tests for ttyslide.controller -- the slide lifecycle state machine."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from ttyslide.animation import Animator
from ttyslide.config import Config
from ttyslide.control import ControlState
from ttyslide.controller import Phase, SlideController
from ttyslide.errors import DownloadError, RenderError
from ttyslide.input import InputListener
from ttyslide.models import ImageDescriptor
from ttyslide.persistence import save_image
from ttyslide.sizing import SizingDirective
from ttyslide.sources import SourceRegistry

from .virtual_terminal import VirtualTerminal

DESCRIPTOR = ImageDescriptor(
    source="fake",
    locator="https://img.example.com/a/cat.jpg",
    caption="A cat",
    artist="Someone",
    description="a cat sitting on a keyboard",
    tags=("cat", "keyboard"),
)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeSource:
    def __init__(self, descriptor: ImageDescriptor = DESCRIPTOR) -> None:
        self.calls = 0
        self.before_return = None
        self.descriptor = descriptor

    def identifier(self) -> str:
        return "fake"

    def describe_tags(self) -> list[str]:
        return []

    async def fetch(self, config: Config) -> ImageDescriptor | None:
        self.calls += 1
        if self.before_return is not None:
            self.before_return(self.calls)
        return self.descriptor


class FakeDownloader:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[str, float]] = []
        self.error = error

    async def download(self, locator: str, timeout: float) -> bytes:
        self.calls.append((locator, timeout))
        if self.error is not None:
            raise self.error
        return b"image-bytes"


class FakeRenderer:
    def __init__(self, terminal: VirtualTerminal, failures: int = 0) -> None:
        self.terminal = terminal
        self.failures = failures
        self.calls: list[SizingDirective] = []

    async def render(self, data: bytes, sizing: SizingDirective, *, colors: bool, fill: bool) -> None:
        self.calls.append(sizing)
        if self.failures > 0:
            self.failures -= 1
            raise RenderError("jp2a failed: Not a JPEG file")
        self.terminal.write("<ASCII ART>\n")


class Harness:
    """Wires a controller to in-memory collaborators and records phases."""

    def __init__(self, tmp_path: Path, *, source: FakeSource | None = None, **overrides) -> None:
        config_fields = {
            "source": "fake",
            "interval_seconds": 1,
            "output_dir": str(tmp_path / "slides"),
        }
        config_fields.update(overrides.pop("config", {}))
        self.config = Config(**config_fields)
        self.terminal = VirtualTerminal(rows=40, columns=120)
        self.control = ControlState()
        self.animator = Animator(
            self.terminal, self.control, spinner_interval=0.001, progress_interval=0.001
        )
        self.source = source or FakeSource()
        self.downloader = overrides.pop("downloader", FakeDownloader())
        self.renderer = overrides.pop("renderer", FakeRenderer(self.terminal))
        self.saves: list[tuple[bytes, ImageDescriptor, str]] = []
        self.phases: list[Phase] = []
        self.clears_at: dict[Phase, list[int]] = {}
        self.phase_hooks: dict[Phase, object] = {}
        self.controller = SlideController(
            self.config,
            terminal=self.terminal,
            control=self.control,
            animator=self.animator,
            registry=SourceRegistry({"fake": self.source}),
            downloader=self.downloader,
            renderer=self.renderer,
            saver=self._save,
            retry_delay=0.01,
            error_pause=0.01,
            on_phase=self._on_phase,
            **overrides,
        )

    def _save(self, data: bytes, descriptor: ImageDescriptor, output_dir: str) -> Path | None:
        self.saves.append((data, descriptor, output_dir))
        return None

    def _on_phase(self, phase: Phase) -> None:
        self.phases.append(phase)
        self.clears_at.setdefault(phase, []).append(self.terminal.clear_screen_count)
        hook = self.phase_hooks.get(phase)
        if hook is not None:
            hook(self.phases.count(phase))

    def quit_on(self, phase: Phase, occurrence: int = 1) -> None:
        def hook(count: int) -> None:
            if count == occurrence:
                self.control.request_quit()

        self.phase_hooks[phase] = hook

    async def run(self, timeout: float = 5) -> int:
        task = asyncio.create_task(self.controller.run())
        return await asyncio.wait_for(task, timeout=timeout)


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestFullIteration:
    @pytest.mark.asyncio
    async def test_phase_order_single_clear_and_one_save(self, tmp_path):
        h = Harness(tmp_path)
        h.quit_on(Phase.FETCHING, occurrence=2)

        assert await h.run() == 0

        assert h.phases == [
            Phase.FETCHING,
            Phase.DOWNLOADING,
            Phase.CONVERTING,
            Phase.DISPLAYING,
            Phase.WAITING,
            Phase.FETCHING,
            Phase.STOPPED,
        ]
        converting = h.clears_at[Phase.CONVERTING][0]
        displaying = h.clears_at[Phase.DISPLAYING][0]
        assert displaying - converting == 1
        assert len(h.saves) == 1
        data, descriptor, output_dir = h.saves[0]
        assert data == b"image-bytes"
        assert descriptor is DESCRIPTOR
        assert output_dir == h.config.output_dir

    @pytest.mark.asyncio
    async def test_download_uses_descriptor_locator_and_timeout(self, tmp_path):
        h = Harness(tmp_path, config={"timeout": 7.5})
        h.quit_on(Phase.FETCHING, occurrence=2)
        await h.run()
        assert h.downloader.calls == [(DESCRIPTOR.locator, 7.5)]

    @pytest.mark.asyncio
    async def test_renderer_gets_sizing_for_terminal(self, tmp_path):
        h = Harness(tmp_path)
        h.quit_on(Phase.FETCHING, occurrence=2)
        await h.run()
        # 116 / 37 is wider than 2.5 -> constrained by height.
        assert h.renderer.calls == [SizingDirective("height", 37)]
        assert "<ASCII ART>" in h.terminal.output

    @pytest.mark.asyncio
    async def test_caption_block(self, tmp_path):
        h = Harness(tmp_path, config={"caption": True})
        h.quit_on(Phase.FETCHING, occurrence=2)
        await h.run()
        output = h.terminal.output
        assert "FAKE" in output
        assert "Someone" in output
        assert "a cat sitting on a keyboard" in output
        assert "cat • keyboard" in output

    @pytest.mark.asyncio
    async def test_no_save(self, tmp_path):
        h = Harness(tmp_path, config={"no_save": True})
        h.quit_on(Phase.FETCHING, occurrence=2)
        await h.run()
        assert h.saves == []

    @pytest.mark.asyncio
    async def test_requested_save_persists_again(self, tmp_path):
        h = Harness(tmp_path)
        h.phase_hooks[Phase.WAITING] = lambda count: h.control.request_save()
        h.quit_on(Phase.FETCHING, occurrence=2)
        await h.run()
        assert len(h.saves) == 2

    @pytest.mark.asyncio
    async def test_requested_save_is_cleared_each_slide(self, tmp_path):
        h = Harness(tmp_path)
        h.phase_hooks[Phase.WAITING] = lambda count: h.control.request_save() if count == 1 else None
        h.quit_on(Phase.FETCHING, occurrence=3)
        await h.run()
        # default save x2 plus one requested save on the first slide
        assert len(h.saves) == 3

    @pytest.mark.asyncio
    async def test_creates_output_directory(self, tmp_path):
        h = Harness(tmp_path)
        h.quit_on(Phase.FETCHING)
        await h.run()
        assert (tmp_path / "slides").is_dir()


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    @pytest.mark.asyncio
    async def test_render_failure_shows_panel_and_refetches(self, tmp_path):
        h = Harness(tmp_path)
        h.renderer.failures = 1
        h.quit_on(Phase.FETCHING, occurrence=2)

        assert await h.run() == 0

        assert h.phases == [
            Phase.FETCHING,
            Phase.DOWNLOADING,
            Phase.CONVERTING,
            Phase.ERROR_RECOVERY,
            Phase.FETCHING,
            Phase.STOPPED,
        ]
        assert h.saves == []
        assert "Could not render image" in h.terminal.output
        assert "Not a JPEG file" in h.terminal.output
        assert "Continuing with the next image..." in h.terminal.output

    @pytest.mark.asyncio
    async def test_fetch_failure_waits_then_refetches(self, tmp_path):
        source = FakeSource()

        async def failing_fetch(config):
            source.calls += 1
            return None

        source.fetch = failing_fetch
        h = Harness(tmp_path, source=source)
        h.quit_on(Phase.FETCHING, occurrence=3)

        await h.run()

        assert h.phases[:4] == [
            Phase.FETCHING,
            Phase.ERROR_RECOVERY,
            Phase.FETCHING,
            Phase.ERROR_RECOVERY,
        ]
        assert h.downloader.calls == []
        assert "Could not fetch an image" in h.terminal.output

    @pytest.mark.asyncio
    async def test_unknown_source(self, tmp_path):
        h = Harness(tmp_path, config={"source": "nowhere"})
        h.quit_on(Phase.ERROR_RECOVERY)
        assert await h.run() == 0
        assert h.phases == [Phase.FETCHING, Phase.ERROR_RECOVERY, Phase.STOPPED]
        assert h.source.calls == 0
        assert "Unknown source" in h.terminal.output

    @pytest.mark.asyncio
    async def test_download_error_is_retried(self, tmp_path):
        h = Harness(tmp_path, downloader=FakeDownloader(DownloadError("404", kind="remote")))
        h.quit_on(Phase.FETCHING, occurrence=2)
        assert await h.run() == 0
        assert h.phases == [
            Phase.FETCHING,
            Phase.DOWNLOADING,
            Phase.ERROR_RECOVERY,
            Phase.FETCHING,
            Phase.STOPPED,
        ]
        assert h.renderer.calls == []
        assert h.saves == []

    @pytest.mark.asyncio
    async def test_save_oserror_is_not_fatal(self, tmp_path):
        h = Harness(tmp_path)

        def broken_save(data, descriptor, output_dir):
            raise PermissionError("read-only")

        h.controller._saver = broken_save
        h.quit_on(Phase.FETCHING, occurrence=2)
        assert await h.run() == 0
        assert Phase.WAITING in h.phases

    @pytest.mark.asyncio
    async def test_requested_save_of_null_byte_name_is_not_fatal(self, tmp_path):
        source = FakeSource(
            ImageDescriptor(source="fake", locator="https://img.example.com/a%00b.jpg")
        )
        h = Harness(tmp_path, source=source, config={"no_save": True})
        h.controller._saver = save_image
        h.phase_hooks[Phase.WAITING] = lambda count: h.control.request_save()
        h.quit_on(Phase.FETCHING, occurrence=2)
        assert await h.run() == 0
        assert Phase.ERROR_RECOVERY not in h.phases
        assert (tmp_path / "slides" / "fake-ab.jpg").read_bytes() == b"image-bytes"

    @pytest.mark.asyncio
    async def test_requested_save_ignores_any_saver_error(self, tmp_path):
        h = Harness(tmp_path, config={"no_save": True})

        def broken_save(data, descriptor, output_dir):
            raise RuntimeError("disk gremlins")

        h.controller._saver = broken_save
        h.phase_hooks[Phase.WAITING] = lambda count: h.control.request_save()
        h.quit_on(Phase.FETCHING, occurrence=2)
        assert await h.run() == 0
        assert Phase.ERROR_RECOVERY not in h.phases

    @pytest.mark.asyncio
    async def test_output_directory_failure_exits_1(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        h = Harness(tmp_path, config={"output_dir": str(blocker / "slides")})
        assert await h.run() == 1
        assert h.source.calls == 0
        assert h.phases == [Phase.STOPPED]


# ---------------------------------------------------------------------------
# Skip, pause, quit
# ---------------------------------------------------------------------------


class TestControlSignals:
    @pytest.mark.asyncio
    async def test_skip_during_fetch_discards_result(self, tmp_path):
        h = Harness(tmp_path)

        def on_fetch(call: int) -> None:
            if call == 1:
                h.control.request_skip()
            else:
                h.control.request_quit()

        h.source.before_return = on_fetch
        await h.run()
        assert h.source.calls == 2
        assert h.downloader.calls == []
        assert h.phases == [Phase.FETCHING, Phase.FETCHING, Phase.STOPPED]

    @pytest.mark.asyncio
    async def test_skip_during_download_abandons_slide(self, tmp_path):
        h = Harness(tmp_path)
        h.phase_hooks[Phase.DOWNLOADING] = lambda count: h.control.request_skip()
        h.quit_on(Phase.FETCHING, occurrence=2)
        await h.run()
        assert h.renderer.calls == []
        assert h.saves == []
        assert h.phases == [Phase.FETCHING, Phase.DOWNLOADING, Phase.FETCHING, Phase.STOPPED]

    @pytest.mark.asyncio
    async def test_skip_during_wait_moves_on(self, tmp_path):
        h = Harness(tmp_path, config={"interval_seconds": 60})
        loop = asyncio.get_running_loop()
        h.phase_hooks[Phase.WAITING] = lambda count: loop.call_later(0.02, h.control.request_skip)
        h.quit_on(Phase.FETCHING, occurrence=2)
        assert await h.run(timeout=2) == 0
        assert h.phases[-2:] == [Phase.FETCHING, Phase.STOPPED]

    @pytest.mark.asyncio
    async def test_quit_during_wait(self, tmp_path):
        h = Harness(tmp_path, config={"interval_seconds": 60})
        listener = InputListener(h.terminal)
        h.controller.bind_keys(listener)
        listener.start()
        assert h.terminal.raw

        loop = asyncio.get_running_loop()
        h.phase_hooks[Phase.WAITING] = lambda count: loop.call_later(0.02, h.terminal.simulate_input, b"q")

        assert await h.run(timeout=2) == 0

        assert h.phases[-2:] == [Phase.WAITING, Phase.STOPPED]
        assert h.phases.count(Phase.FETCHING) == 1
        assert not h.animator.active
        assert not h.terminal.raw
        assert not listener.active
        assert h.terminal.cursor_visible
        assert h.terminal.output.endswith("\x1b[2J\x1b[H\x1b[?25h")

    @pytest.mark.asyncio
    async def test_quit_during_slow_fetch(self, tmp_path):
        h = Harness(tmp_path)
        started = asyncio.Event()

        async def slow_fetch(config):
            started.set()
            await asyncio.sleep(60)

        h.source.fetch = slow_fetch
        task = asyncio.create_task(h.controller.run())
        await asyncio.wait_for(started.wait(), timeout=1)
        h.controller.stop()
        assert await asyncio.wait_for(task, timeout=1) == 0
        assert h.phases == [Phase.FETCHING, Phase.STOPPED]

    @pytest.mark.asyncio
    async def test_force_quit(self, tmp_path):
        h = Harness(tmp_path, config={"interval_seconds": 60})
        loop = asyncio.get_running_loop()
        h.phase_hooks[Phase.WAITING] = lambda count: loop.call_later(0.02, h.controller.force_quit)
        assert await h.run(timeout=2) == 0
        assert h.phases[-1] is Phase.STOPPED
        assert not h.control.running

    @pytest.mark.asyncio
    async def test_quit_wins_over_skip(self, tmp_path):
        h = Harness(tmp_path)

        def on_fetch(call: int) -> None:
            h.control.request_skip()
            h.control.request_quit()

        h.source.before_return = on_fetch
        await h.run()
        assert h.source.calls == 1
        assert h.phases == [Phase.FETCHING, Phase.STOPPED]

    @pytest.mark.asyncio
    async def test_pause_holds_slide(self, tmp_path):
        h = Harness(tmp_path)
        h.phase_hooks[Phase.WAITING] = lambda count: h.control.toggle_pause()
        task = asyncio.create_task(h.controller.run())
        await asyncio.sleep(0.1)
        assert h.phases[-1] is Phase.WAITING
        assert h.phases.count(Phase.FETCHING) == 1
        h.control.request_quit()
        assert await asyncio.wait_for(task, timeout=1) == 0


# ---------------------------------------------------------------------------
# Key bindings
# ---------------------------------------------------------------------------


class TestBindKeys:
    def test_registers_every_command(self, tmp_path):
        h = Harness(tmp_path)
        listener = InputListener(h.terminal)
        h.controller.bind_keys(listener)
        assert set(listener.keys()) == {"space", "n", "right", "s", "q", "escape", "ctrl+c"}

    def test_keys_drive_control_state(self, tmp_path):
        h = Harness(tmp_path)
        listener = InputListener(h.terminal)
        h.controller.bind_keys(listener)

        listener.feed(b" ")
        assert h.control.paused
        listener.feed(b"\x1b[C")
        assert h.control.skip_requested
        listener.feed(b"s")
        assert h.control.save_requested
        listener.feed(b"\x1b")
        assert not h.control.running
