"""
KeySmith Console Interface
==========================

Thin layer over :class:`rich.console.Console` so every KeySmith command
shares one theme: a banner, section rules, tagged status messages, a
severity-coloured findings table and a spinner for slow work.

JSON mode and the test suite construct the console with ``quiet=True``;
nothing is printed but the calls still run.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

_KEYSMITH_THEME = Theme(
    {
        "ks.banner": "bold bright_cyan",
        "ks.section": "bold bright_magenta",
        "ks.success": "bold green",
        "ks.warning": "bold yellow",
        "ks.error": "bold red",
        "ks.info": "bold bright_blue",
        "ks.dim": "dim white",
        "ks.highlight": "bold bright_white",
        "ks.secret": "bold bright_green",
        # Severity styles, referenced by Severity.style
        "critical": "bold white on red",
        "high": "bold red",
        "medium": "bold yellow",
        "low": "bold bright_cyan",
        "info": "bold bright_blue",
    }
)

_BANNER_ART = r"""[bright_cyan]
  _  __          ____            _ _   _
 | |/ /___ _   _/ ___| _ __ ___ (_) |_| |__
 | ' // _ \ | | \___ \| '_ ` _ \| | __| '_ \
 | . \  __/ |_| |___) | | | | | | | |_| | | |
 |_|\_\___|\__, |____/|_| |_| |_|_|\__|_| |_|
           |___/
[/bright_cyan]"""

_TAGLINE = "Password strength & generation toolkit"

# (theme style, glyph, tag) per message kind
_MESSAGE_TAGS: dict[str, tuple[str, str, str]] = {
    "success": ("ks.success", "✔", "SUCCESS"),
    "warning": ("ks.warning", "⚠", "WARNING"),
    "error": ("ks.error", "✘", "ERROR"),
    "info": ("ks.info", "ℹ", "INFO"),
}


def themed_table(title: str | None = None, *, caption: str | None = None) -> Table:
    """Empty :class:`Table` with the KeySmith border and header styling."""
    return Table(
        title=title,
        caption=caption,
        border_style="bright_cyan",
        header_style="bold bright_magenta",
        show_lines=True,
        padding=(0, 1),
    )


class KeySmithConsole:
    """Themed console shared by the CLI and the result renderers.

    Args:
        quiet:  Swallow all output.
        record: Keep a copy of the output for :meth:`export_text`.
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        self._console = Console(
            theme=_KEYSMITH_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        return self._console

    def banner(self, version: str = "1.0.0") -> None:
        body = Text.from_markup(
            f"{_BANNER_ART}\n"
            f"[ks.highlight]{_TAGLINE}[/ks.highlight]\n"
            f"[ks.dim]Version: {version}[/ks.dim]"
        )
        self._console.print(
            Panel(Align.center(body), border_style="bright_cyan", padding=(0, 2))
        )

    def section(self, title: str) -> None:
        self._console.rule(f"  {title}  ", style="ks.section", characters="─")
        self._console.print()

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    # ------------------------------------------------------------------ #
    #  Tagged messages
    # ------------------------------------------------------------------ #

    def _message(self, kind: str, message: str) -> None:
        style, glyph, tag = _MESSAGE_TAGS[kind]
        self._console.print(f"[{style}][{glyph}] {tag}:[/{style}] {message}")

    def success(self, message: str) -> None:
        self._message("success", message)

    def warning(self, message: str) -> None:
        self._message("warning", message)

    def error(self, message: str) -> None:
        self._message("error", message)

    def info(self, message: str) -> None:
        self._message("info", message)

    # ------------------------------------------------------------------ #
    #  Findings / spinner
    # ------------------------------------------------------------------ #

    def findings_table(self, findings: Sequence[Any]) -> None:
        """Numbered table of :class:`shared.models.Finding` objects."""
        tbl = themed_table("Findings")
        tbl.add_column("#", style="dim", width=4, justify="right")
        tbl.add_column("Severity", width=10)
        tbl.add_column("Title")
        tbl.add_column("Description", ratio=2)

        for idx, finding in enumerate(findings, start=1):
            style = finding.severity.style
            tbl.add_row(
                str(idx),
                f"[{style}]{finding.severity.value}[/{style}]",
                finding.title,
                finding.description,
            )
        self._console.print(tbl)

    @contextmanager
    def status(self, message: str = "Working...") -> Iterator[Status]:
        """Spinner shown for the duration of the ``with`` block."""
        with self._console.status(
            f"[ks.info]{message}[/ks.info]",
            spinner="dots",
            spinner_style="bright_cyan",
        ) as spinner:
            yield spinner

    def export_text(self) -> str:
        """Recorded output as plain text; needs ``record=True``."""
        return self._console.export_text()
