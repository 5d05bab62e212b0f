"""Rich live view of a consumer's snapshots.

The renderer is a snapshot callback: pass it as ``on_snapshot`` to a
``StreamConsumer`` and it redraws the latest state. It only ever reads
snapshots, so aborting the view never affects production.
"""

from __future__ import annotations

from types import TracebackType
from typing import Final

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.text import Text

from linkstream.stream import StreamPhase, StreamState

_REFRESH_PER_SEC: Final[int] = 8
_PHASE_STYLES: Final[dict[StreamPhase, str]] = {
    StreamPhase.IDLE: "dim",
    StreamPhase.STREAMING: "cyan",
    StreamPhase.DONE: "green",
    StreamPhase.ERROR: "red",
}


def render_state(state: StreamState[str]) -> RenderableType:
    """Build the renderable for one snapshot."""
    lines: list[RenderableType] = [
        Text.assemble("Stream State: ", (state.phase.value, _PHASE_STYLES[state.phase])),
    ]
    lines.extend(Text(f"  • {item}") for item in state.items)
    if state.phase is StreamPhase.ERROR:
        lines.append(Text(str(state.error), style="bold red"))
    return Group(*lines)


class RichStreamRenderer:
    """Redraw a single stream's state in place on a Rich console."""

    def __init__(self, *, console: Console | None = None) -> None:
        self._console = console or Console()
        self._state: StreamState[str] = StreamState()
        self._live = Live(
            render_state(self._state),
            console=self._console,
            auto_refresh=False,
            refresh_per_second=_REFRESH_PER_SEC,
        )

    @property
    def state(self) -> StreamState[str]:
        return self._state

    def __call__(self, state: StreamState[str]) -> None:
        self._state = state
        self._live.update(render_state(state), refresh=True)

    def __enter__(self) -> RichStreamRenderer:
        self._live.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._live.stop()
