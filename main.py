#!/usr/bin/env python3
"""
murmur - Push-to-Talk Dictation
===============================

Main entry point.

Usage:
    python main.py MODEL                # Interactive mode (space toggles recording)
    python main.py MODEL --text         # Line-based mode, no keyboard hook
    python main.py --config config.yaml # Model path taken from the config file
    python main.py --help               # Show help

Keys:
    SPACE  start / stop recording (stop transcribes everything recorded so far)
    r      retry transcription of the recorded audio (after a failed stop)
    c      copy the transcript to the clipboard
    q      quit
"""

import argparse
import logging
import queue
import sys
import threading
from enum import Enum, auto
from pathlib import Path
from typing import Optional

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

try:
    from pynput import keyboard
except ImportError:
    keyboard = None

from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from core import MurmurError, SegmentStatus, SessionController
from infra.config import AppConfig
from infra.logging import configure_logging


console = Console()

TICK_SECONDS = 0.2
LOADER_FRAMES = ("", ".", "..", "...")


class InputEvent(Enum):
    TOGGLE = auto()
    RETRY = auto()
    COPY = auto()
    QUIT = auto()
    TICK = auto()


def create_controller(config: AppConfig) -> SessionController:
    """
    Open the microphone and load the model.

    Raises:
        DeviceError: If no input device can be opened
        ModelLoadError: If the model cannot be loaded
    """
    from audio import AudioBuffer, MicrophoneCapture
    from stt import STTConfig, WhisperEngine

    engine = WhisperEngine(STTConfig(
        model=config.model.path,
        language=config.model.language,
        device=config.model.device,
        compute_type=config.model.compute_type,
    ))
    capture = MicrophoneCapture(
        buffer=AudioBuffer(max_retention_seconds=config.audio.max_retention_seconds)
    )
    return SessionController(capture, engine)


class App:
    """Terminal front end. Renders controller state and forwards key presses."""

    def __init__(self, controller: SessionController, clipboard):
        self.controller = controller
        self.clipboard = clipboard
        self.events: "queue.Queue[InputEvent]" = queue.Queue()
        self.loader = 0
        self._stop_ticker = threading.Event()

    def handle(self, event: InputEvent) -> bool:
        """Process one event. Returns False when the app should quit."""
        if event is InputEvent.QUIT:
            return False

        if event is InputEvent.TICK:
            if self.controller.is_running:
                self.loader = (self.loader + 1) % len(LOADER_FRAMES)
            return True

        try:
            if event is InputEvent.TOGGLE:
                self.loader = 0
                self.controller.toggle()
            elif event is InputEvent.RETRY:
                self.controller.retry()
            elif event is InputEvent.COPY:
                self.controller.copy_to_clipboard(self.clipboard)
        except MurmurError as e:
            self.controller.report(e)

        return True

    def render(self) -> Layout:
        text = Text()
        for segment, status in self.controller.lines():
            style = "bold blue" if status is SegmentStatus.NEW else ""
            text.append(f"{segment}\n", style=style)
        text.append(LOADER_FRAMES[self.loader])

        notifications = Text("\n".join(self.controller.notifications))

        controls = Text(justify="center")
        controls.append(
            "Stop <space>" if self.controller.is_running else "Start <space>",
            style="bold",
        )
        controls.append(" | ")
        controls.append("Retry <r>", style="bold")
        controls.append(" | ")
        controls.append("Copy <c>", style="bold")
        controls.append(" | ")
        controls.append("Quit <q>", style="bold")

        layout = Layout()
        layout.split_column(
            Layout(Panel(text, title="Text"), ratio=14),
            Layout(Panel(notifications, title="Notifications"), ratio=5),
            Layout(controls, size=1),
        )
        return layout

    def _tick(self) -> None:
        while not self._stop_ticker.wait(TICK_SECONDS):
            self.events.put(InputEvent.TICK)

    def _on_press(self, key) -> None:
        if key == keyboard.Key.space:
            self.events.put(InputEvent.TOGGLE)
            return

        char = getattr(key, "char", None)
        if char in ("q", "\x03"):
            self.events.put(InputEvent.QUIT)
        elif char == "c":
            self.events.put(InputEvent.COPY)
        elif char == "r":
            self.events.put(InputEvent.RETRY)

    def run(self) -> None:
        """Run the interactive loop until quit."""
        ticker = threading.Thread(target=self._tick, daemon=True)
        ticker.start()

        listener = keyboard.Listener(on_press=self._on_press)
        listener.start()

        try:
            with Live(self.render(), console=console, screen=True, auto_refresh=False) as live:
                while True:
                    event = self.events.get()
                    if not self.handle(event):
                        break
                    live.update(self.render(), refresh=True)
        except KeyboardInterrupt:
            pass
        finally:
            self._stop_ticker.set()
            listener.stop()

    def run_text_mode(self) -> None:
        """Line-based loop: 't' toggles, 'r' retries, 'c' copies, 'q' quits."""
        console.print(Panel(
            "Text Mode\n't' start/stop recording | 'r' retry | 'c' copy | 'q' quit",
            title="murmur",
            border_style="yellow",
        ))
        commands = {
            "t": InputEvent.TOGGLE, "r": InputEvent.RETRY,
            "c": InputEvent.COPY, "q": InputEvent.QUIT,
        }

        while True:
            try:
                line = console.input("\n[bold cyan]>[/bold cyan] ").strip().lower()
            except (KeyboardInterrupt, EOFError):
                break

            event = commands.get(line)
            if event is None:
                continue
            shown = len(self.controller.notifications)
            if not self.handle(event):
                break

            for message in self.controller.notifications[shown:]:
                console.print(f"[dim]{message}[/dim]")
            if event in (InputEvent.TOGGLE, InputEvent.RETRY) and not self.controller.is_running:
                console.print(Group(*self._styled_lines()))

    def _styled_lines(self):
        for segment, status in self.controller.lines():
            style = "bold blue" if status is SegmentStatus.NEW else ""
            yield Text(str(segment), style=style)


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="murmur - push-to-talk dictation"
    )
    parser.add_argument(
        "model",
        nargs="?",
        help="Path to a faster-whisper model directory, or a model name"
    )
    parser.add_argument(
        "--config", "-c",
        default="config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--max-retention",
        type=float,
        help="Keep at most this many seconds of audio (default: keep everything)"
    )
    parser.add_argument(
        "--text", "-t",
        action="store_true",
        help="Run in line-based mode (no global keyboard hook)"
    )

    args = parser.parse_args(argv)

    config = AppConfig.load(args.config, overrides={
        "model.path": args.model,
        "logging.level": args.log_level,
        "audio.max_retention_seconds": args.max_retention,
    })

    # Console logging would draw over the full-screen UI
    configure_logging(
        level=getattr(logging, config.logging.level, logging.INFO),
        log_dir=config.logging.dir,
        console=config.logging.console or args.text,
    )
    logger = logging.getLogger("murmur.main")

    if not config.model.path:
        parser.error("No model provided (positional argument or model.path in config)")

    try:
        from infra.clipboard import SystemClipboard

        console.print("[dim]Loading model and opening microphone...[/dim]")
        controller = create_controller(config)
        app = App(controller, SystemClipboard())

        try:
            if args.text or keyboard is None:
                if keyboard is None:
                    console.print("[yellow]pynput is unavailable, using text mode.[/yellow]")
                app.run_text_mode()
            else:
                app.run()
        finally:
            controller.shutdown()

        return 0

    except MurmurError as e:
        logger.critical(f"Startup failed: {e}")
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
