"""
KeySmith Console Output
=======================

Rich-based formatters for KeySmith results: a colour strength meter,
entropy breakdown, crack-time tiers, pattern warnings and suggestions,
generated secrets, similarity breakdowns, breach status and random
source quality.

Uses the shared :class:`KeySmithConsole` for consistent styling.

References:
    - Rich Library Documentation. https://rich.readthedocs.io/
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from rich.panel import Panel
from rich.text import Text

from shared.console import KeySmithConsole, themed_table
from shared.models import ScanResult
from keysmith.core.models import (
    BreachResult,
    PolicyResult,
    SimilarityResult,
    SourceQualityReport,
    StrengthLabel,
    StrengthResult,
)


# ===================================================================== #
#  Colour Maps
# ===================================================================== #

_LABEL_COLOURS: dict[str, str] = {
    StrengthLabel.VERY_WEAK.value: "bold white on red",
    StrengthLabel.WEAK.value: "bold red",
    StrengthLabel.MODERATE.value: "bold yellow",
    StrengthLabel.STRONG.value: "bold green",
    StrengthLabel.VERY_STRONG.value: "bold bright_green",
    "weak": "bold red",
    "moderate": "bold yellow",
    "strong": "bold green",
    "very-strong": "bold bright_green",
}

_METER_COLOURS = ("red", "dark_orange", "yellow", "green", "bright_green")


class KeySmithConsoleOutput:
    """Console views for KeySmith results.

    Usage::

        output = KeySmithConsoleOutput(KeySmithConsole())
        output.render(await engine.analyze_password(pw))
    """

    def __init__(self, console: Optional[KeySmithConsole] = None) -> None:
        self.console = console or KeySmithConsole()
        self._rich = self.console.rich

    # ------------------------------------------------------------------ #
    #  Dispatcher
    # ------------------------------------------------------------------ #

    def render(self, result: ScanResult) -> None:
        """Render every view the result's metadata carries, then its findings."""
        meta = result.metadata

        if "strength" in meta:
            self.display_strength(StrengthResult.model_validate(meta["strength"]))
        if "breach" in meta:
            self.display_breach(BreachResult.model_validate(meta["breach"]))
        if "secrets" in meta:
            self.display_secrets(meta["secrets"], kind=meta.get("kind", "password"))
        if "similarity" in meta:
            self.display_similarity(SimilarityResult.model_validate(meta["similarity"]))
        if "policy" in meta:
            self.display_policy(PolicyResult.model_validate(meta["policy"]))
        if "source_quality" in meta:
            self.display_source_quality(
                SourceQualityReport.model_validate(meta["source_quality"])
            )

        problems = [f for f in result.findings if f.severity.value != "INFO"]
        if problems:
            self.console.blank()
            self.console.findings_table(problems)

        if result.has_errors:
            self.console.error(result.summary)
        elif result.summary:
            self.console.blank()
            self.console.info(result.summary)

    # ------------------------------------------------------------------ #
    #  Strength
    # ------------------------------------------------------------------ #

    def display_strength(self, result: StrengthResult) -> None:
        """Strength meter, details, entropy breakdown, crack times, advice."""
        self.console.section("Password Strength")

        label = result.label.value
        colour = _LABEL_COLOURS.get(label, "white")

        meter = Text()
        meter.append("Score: ", style="bold")
        meter.append(f"{result.score}/4  ")
        meter.append("[", style="dim")
        segment = 8
        for i in range(5 * segment):
            if i < (result.score + 1) * segment and result.length:
                meter.append("█", style=_METER_COLOURS[i // segment])
            else:
                meter.append("░", style="dim")
        meter.append("]  ", style="dim")
        meter.append(label.upper(), style=colour)
        self._rich.print(Panel(meter, title="Strength Meter", border_style="cyan"))

        tbl = themed_table()
        tbl.add_column("Property", style="bold")
        tbl.add_column("Value")
        tbl.add_row("Password", result.password_masked or "-")
        tbl.add_row("Length", str(result.length))
        tbl.add_row("Entropy", f"{result.entropy:.2f} bits")
        counts = result.char_type_counts
        tbl.add_row(
            "Character Types",
            f"{counts.lowercase} lower, {counts.uppercase} upper, "
            f"{counts.numbers} digits, {counts.symbols} symbols",
        )
        self._rich.print(tbl)

        self.display_entropy_breakdown(result)

        if result.crack_times and result.length:
            crack_tbl = themed_table("Crack Time Estimates")
            crack_tbl.add_column("Attack Scenario", style="bold")
            crack_tbl.add_column("Speed", justify="right")
            crack_tbl.add_column("Estimated Time", justify="right")
            for estimate in result.crack_times:
                crack_tbl.add_row(
                    estimate.scenario,
                    f"{estimate.guesses_per_second:.0e} g/s",
                    estimate.display,
                )
            self._rich.print(crack_tbl)

        if result.detected_patterns:
            self._rich.print()
            self._rich.print("[bold]Patterns Detected:[/bold]")
            for pattern in result.detected_patterns:
                self._rich.print(f"  [yellow]⚠[/yellow] {pattern}")
            if result.pattern_analysis.patterns:
                self._rich.print(
                    "  [ks.dim]Matched: "
                    + ", ".join(dict.fromkeys(result.pattern_analysis.patterns))
                    + "[/ks.dim]"
                )

        if result.feedback.warning:
            self._rich.print()
            self.console.warning(result.feedback.warning)

        if result.feedback.suggestions:
            self._rich.print()
            self._rich.print("[bold]Suggestions:[/bold]")
            for suggestion in result.feedback.suggestions:
                self._rich.print(f"  [bright_cyan]•[/bright_cyan] {suggestion}")

    def display_entropy_breakdown(self, result: StrengthResult) -> None:
        detail = result.entropy_detail
        if not result.length:
            return
        tbl = themed_table("Entropy Breakdown")
        tbl.add_column("Component", style="bold")
        tbl.add_column("Bits", justify="right")
        tbl.add_row("Character classes", f"{detail.base_entropy:.2f}")
        tbl.add_row("Length bonus", f"+{detail.length_bonus:.2f}")
        tbl.add_row("Uniqueness bonus", f"+{detail.uniqueness_bonus:.2f}")
        tbl.add_row("Pattern penalty", f"-{detail.pattern_penalty:.2f}")
        tbl.add_row("[bold]Total[/bold]", f"[bold]{detail.entropy:.2f}[/bold]")
        tbl.add_row("Effective length", f"{detail.effective_length:.1f}")
        tbl.add_row("Bits per character", f"{detail.bits_per_char:.2f}")
        tbl.add_row("Complexity", f"{detail.complexity_score:.0f}%")
        self._rich.print(tbl)

    # ------------------------------------------------------------------ #
    #  Breach
    # ------------------------------------------------------------------ #

    def display_breach(self, result: BreachResult) -> None:
        self.console.section("Breach Check")
        if result.is_breached:
            self.console.error(
                f"Found in {result.occurrences:,} known data breaches. Do not use it."
            )
        elif not result.verified:
            self.console.warning("Breach service unavailable; status unknown.")
        else:
            self.console.success("Not found in known data breaches.")

    # ------------------------------------------------------------------ #
    #  Generation
    # ------------------------------------------------------------------ #

    def display_secrets(self, secrets: Sequence[dict[str, Any]], kind: str = "password") -> None:
        self.console.section(f"Generated {kind.title()}s")
        tbl = themed_table()
        tbl.add_column("#", style="dim", width=3, justify="right")
        tbl.add_column(kind.title(), style="ks.secret")
        tbl.add_column("Length", justify="right")
        tbl.add_column("Entropy", justify="right")
        tbl.add_column("Strength", justify="center")

        for idx, item in enumerate(secrets, start=1):
            label = str(item.get("label", ""))
            colour = _LABEL_COLOURS.get(label, "white")
            tbl.add_row(
                str(idx),
                Text(str(item["value"])),
                str(item.get("length", len(str(item["value"])))),
                f"{item.get('entropy', 0.0):.1f} bits",
                f"[{colour}]{label}[/{colour}]",
            )
        self._rich.print(tbl)

        for item in secrets:
            for suggestion in item.get("suggestions") or []:
                self._rich.print(f"  [bright_cyan]•[/bright_cyan] {suggestion}")

    # ------------------------------------------------------------------ #
    #  Similarity / Policy
    # ------------------------------------------------------------------ #

    def display_similarity(self, result: SimilarityResult) -> None:
        self.console.section("Password Similarity")
        tbl = themed_table()
        tbl.add_column("Component", style="bold")
        tbl.add_column("Similarity", justify="right")
        tbl.add_row("Length", f"{result.length_similarity:.0%}")
        tbl.add_row("Character types", f"{result.type_similarity:.0%}")
        tbl.add_row("Common substring", f"{result.substring_similarity:.0%}")
        tbl.add_row("Shared runs", f"{result.pattern_similarity:.0%}")
        tbl.add_row("[bold]Overall[/bold]", f"[bold]{result.score:.0%}[/bold]")
        self._rich.print(tbl)

        if result.verdict:
            self.console.warning(f"Passwords are {result.verdict}.")
        else:
            self.console.success("Passwords are sufficiently different.")

    def display_policy(self, result: PolicyResult) -> None:
        self.console.section("Password Policy")
        for error in result.errors:
            self.console.error(error)
        for warning in result.warnings:
            self.console.warning(warning)
        if result.is_valid:
            self.console.success(f"Policy satisfied (score {result.score}/4).")

    # ------------------------------------------------------------------ #
    #  Random Sources
    # ------------------------------------------------------------------ #

    def display_sources(self, sources: Sequence[dict[str, Any]]) -> None:
        self.console.section("Random Sources")
        tbl = themed_table()
        tbl.add_column("Source", style="bold")
        tbl.add_column("Name")
        tbl.add_column("Secure", justify="center")
        tbl.add_column("Description")
        for src in sources:
            name = src["label"] + (" [ks.success](recommended)[/ks.success]" if src["recommended"] else "")
            secure = "[green]yes[/green]" if src["is_secure"] else "[red]no[/red]"
            tbl.add_row(src["source"], name, secure, src["description"])
        self._rich.print(tbl)

    def display_source_quality(self, report: SourceQualityReport) -> None:
        self.console.section(f"Random Source Quality: {report.source.label}")

        overall_colour = "bold bright_green" if report.overall_pass else "bold red"
        passed = sum(1 for t in report.tests if t.passed)

        summary = Text()
        summary.append("Overall: ", style="bold")
        summary.append("PASS" if report.overall_pass else "FAIL", style=overall_colour)
        summary.append(f"\nTests: {passed}/{len(report.tests)} passed\n")
        summary.append(f"Sample: {report.sample_bytes:,} bytes, ")
        summary.append(f"{report.bits_per_byte:.4f} bits/byte\n")
        summary.append(report.assessment)
        self._rich.print(Panel(summary, title="Source Test Results", border_style="cyan"))

        if report.tests:
            tbl = themed_table("Individual Tests (NIST SP 800-22)")
            tbl.add_column("#", style="dim", width=3, justify="right")
            tbl.add_column("Test Name", style="bold")
            tbl.add_column("p-value", justify="right")
            tbl.add_column("Statistic", justify="right")
            tbl.add_column("Result", justify="center")
            for idx, test in enumerate(report.tests, start=1):
                colour = "green" if test.passed else "red"
                tbl.add_row(
                    str(idx),
                    test.test_name,
                    f"{test.p_value:.6f}",
                    f"{test.statistic:.4f}",
                    f"[{colour}]{'PASS' if test.passed else 'FAIL'}[/{colour}]",
                )
            self._rich.print(tbl)

        if not report.is_secure:
            self.console.warning(
                "This source is predictable; never use it for real secrets."
            )
