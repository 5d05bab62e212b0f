"""Command-line entrypoint: ``linkstream demo`` and ``linkstream serve``."""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv
from rich.console import Console

from linkstream.cli_options import parse_cli_args
from linkstream.display import RichStreamRenderer
from linkstream.options import StreamOptions
from linkstream.stream import StreamConsumer, StreamPhase, StreamState
from linkstream.words import start_word_stream

_log = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def run_demo(options: StreamOptions, renderer: RichStreamRenderer) -> StreamState[str]:
    """Produce one word stream and render it until it finishes."""
    head = start_word_stream(options, name="demo")
    with renderer:
        consumer: StreamConsumer[str] = StreamConsumer(head, on_snapshot=renderer)
        return await consumer.run()


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and dispatch to the selected subcommand."""
    load_dotenv()
    args = parse_cli_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.log_level)

    if args.command == "serve":
        from linkstream.server.cli import run_server

        run_server(host=args.host, port=args.port, log_level=args.log_level)
        return 0

    options = StreamOptions.from_raw(
        {"words": args.words, "delay": args.delay, "throwError": args.throw_error}
    )
    console = Console()
    renderer = RichStreamRenderer(console=console)
    try:
        final = asyncio.run(run_demo(options, renderer))
    except KeyboardInterrupt:
        last = renderer.state
        console.print(
            f"[yellow]Aborted[/yellow] in phase {last.phase.value} after {len(last.items)} item(s)"
        )
        return 130
    _log.debug("Demo finished in phase %s with %d item(s)", final.phase, len(final.items))
    return 1 if final.phase is StreamPhase.ERROR else 0


if __name__ == "__main__":
    raise SystemExit(main())
