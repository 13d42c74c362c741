"""
KeySmith CLI
============

Click-based command-line interface for KeySmith: password strength
checking, password and passphrase generation, breach lookups, similarity
comparison, policy validation and random source testing.

Usage::

    keysmith check "Tr0ub4dor&3" --breach
    keysmith generate --mode recipe --recipe "Ww00##" --count 3
    keysmith passphrase --words 5 --separator _
    keysmith breach
    keysmith compare "Summer2023!" "Summer2024!"
    keysmith sources
    keysmith rng-test --source pseudo --samples 8192

Passwords given as arguments end up in shell history; omit the argument
on ``check``, ``breach`` and ``policy`` to be prompted with hidden input.

References:
    - Click Documentation. https://click.palletsprojects.com/
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
from typing import Optional

import click
from pydantic import ValidationError

from shared.config import KeySmithConfig
from shared.console import KeySmithConsole
from shared.models import ScanResult

from keysmith import __version__
from keysmith.core.engine import KeySmithEngine
from keysmith.core.models import (
    GenerationMode,
    PassphraseOptions,
    PasswordOptions,
    RandomSource,
)
from keysmith.output.console import KeySmithConsoleOutput

_SOURCE_CHOICE = click.Choice([s.value for s in RandomSource])


# ===================================================================== #
#  Async Runner Helper
# ===================================================================== #

def _run_async(coro):
    """Run an async coroutine from synchronous Click handlers."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        with concurrent.futures.ThreadPoolExecutor() as pool:
            return pool.submit(asyncio.run, coro).result()
    return asyncio.run(coro)


# ===================================================================== #
#  CLI Group
# ===================================================================== #

@click.group()
@click.version_option(__version__, prog_name="keysmith")
@click.option(
    "--config", "-c",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a KeySmith configuration file (TOML).",
)
@click.option(
    "--output", "-o",
    type=click.Choice(["console", "json"]),
    default="console",
    help="Output format. JSON goes to stdout.",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    default=False,
    help="Suppress the banner and console output.",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], output: str, quiet: bool) -> None:
    """KeySmith -- password strength analysis and generation."""
    ctx.ensure_object(dict)

    try:
        ks_config = KeySmithConfig.load(config)
    except FileNotFoundError as exc:
        raise click.BadParameter(str(exc), param_hint="--config") from exc

    ctx.obj["config"] = ks_config
    ctx.obj["output_format"] = output
    ctx.obj["quiet"] = quiet

    console = KeySmithConsole(quiet=quiet or output == "json")
    ctx.obj["console"] = console
    ctx.obj["engine"] = ctx.obj.get("engine") or KeySmithEngine(ks_config)
    ctx.obj["display"] = KeySmithConsoleOutput(console)

    if not quiet and output == "console":
        console.banner(version=__version__)


def _handle_output(ctx: click.Context, result: ScanResult) -> None:
    """Render *result* in the selected output format."""
    if ctx.obj["output_format"] == "json":
        click.echo(result.model_dump_json(indent=2))
    else:
        display: KeySmithConsoleOutput = ctx.obj["display"]
        display.render(result)


def _source(ctx: click.Context, value: Optional[str]) -> RandomSource:
    return RandomSource(value or ctx.obj["config"].generator.default_source)


def _prompt_password(password: Optional[str]) -> str:
    if password is not None:
        return password
    return click.prompt("Password", hide_input=True, default="", show_default=False)


# ===================================================================== #
#  Subcommands
# ===================================================================== #

@cli.command()
@click.argument("password", required=False)
@click.option("--breach", is_flag=True, default=False, help="Also run the breach lookup.")
@click.pass_context
def check(ctx: click.Context, password: Optional[str], breach: bool) -> None:
    """Analyse password strength, entropy, patterns and crack times."""
    engine: KeySmithEngine = ctx.obj["engine"]
    result = _run_async(
        engine.analyze_password(_prompt_password(password), include_breach=breach)
    )
    _handle_output(ctx, result)


@cli.command()
@click.option(
    "--mode", "-m",
    type=click.Choice([m.value for m in GenerationMode]),
    default=GenerationMode.RANDOM.value,
    help="Generation mode.",
)
@click.option("--length", "-l", type=int, default=None, help="Length in random mode.")
@click.option("--uppercase/--no-uppercase", default=True)
@click.option("--lowercase/--no-lowercase", default=True)
@click.option("--numbers/--no-numbers", default=True)
@click.option("--symbols/--no-symbols", default=True)
@click.option("--exclude-ambiguous", is_flag=True, default=False, help="Drop I, l, 1, O and 0.")
@click.option("--recipe", "-r", default=None, help="Recipe template (A a 0 # W w C c Y M D).")
@click.option("--source", "-s", type=_SOURCE_CHOICE, default=None, help="Random source.")
@click.option("--count", "-n", type=click.IntRange(min=1), default=1, help="How many to generate.")
@click.pass_context
def generate(
    ctx: click.Context,
    mode: str,
    length: Optional[int],
    uppercase: bool,
    lowercase: bool,
    numbers: bool,
    symbols: bool,
    exclude_ambiguous: bool,
    recipe: Optional[str],
    source: Optional[str],
    count: int,
) -> None:
    """Generate random, memorable or recipe-based passwords."""
    gen_cfg = ctx.obj["config"].generator
    try:
        options = PasswordOptions(
            mode=GenerationMode(mode),
            length=length if length is not None else gen_cfg.default_length,
            uppercase=uppercase,
            lowercase=lowercase,
            numbers=numbers,
            symbols=symbols,
            exclude_ambiguous=exclude_ambiguous,
            recipe=recipe if recipe is not None else gen_cfg.default_recipe,
            source=_source(ctx, source),
        )
    except ValidationError as exc:
        raise click.UsageError(f"Invalid generator options: {exc}") from exc

    engine: KeySmithEngine = ctx.obj["engine"]
    _handle_output(ctx, _run_async(engine.generate_passwords(options, count)))


@cli.command()
@click.option("--words", "-w", type=int, default=None, help="Number of words (3-8).")
@click.option("--casing/--no-casing", default=True, help="Capitalise some words.")
@click.option("--numbers/--no-numbers", default=True, help="Allow number suffixes.")
@click.option("--symbols/--no-symbols", default=True, help="Allow symbol suffixes.")
@click.option("--separator", "-S", default=None, help="Word separator.")
@click.option("--source", "-s", type=_SOURCE_CHOICE, default=None, help="Random source.")
@click.option("--count", "-n", type=click.IntRange(min=1), default=1, help="How many to generate.")
@click.pass_context
def passphrase(
    ctx: click.Context,
    words: Optional[int],
    casing: bool,
    numbers: bool,
    symbols: bool,
    separator: Optional[str],
    source: Optional[str],
    count: int,
) -> None:
    """Generate adjective-noun-verb passphrases."""
    gen_cfg = ctx.obj["config"].generator
    try:
        options = PassphraseOptions(
            word_count=words if words is not None else gen_cfg.passphrase_words,
            include_casing=casing,
            include_numbers=numbers,
            include_symbols=symbols,
            separator=separator if separator is not None else gen_cfg.separator,
            source=_source(ctx, source),
        )
    except ValidationError as exc:
        raise click.UsageError(f"Invalid passphrase options: {exc}") from exc

    engine: KeySmithEngine = ctx.obj["engine"]
    _handle_output(ctx, _run_async(engine.generate_passphrases(options, count)))


@cli.command()
@click.argument("password", required=False)
@click.pass_context
def breach(ctx: click.Context, password: Optional[str]) -> None:
    """Look a password up in known breaches (k-anonymity, prefix only)."""
    engine: KeySmithEngine = ctx.obj["engine"]
    _handle_output(ctx, _run_async(engine.check_breach(_prompt_password(password))))


@cli.command()
@click.argument("previous")
@click.argument("candidate")
@click.pass_context
def compare(ctx: click.Context, previous: str, candidate: str) -> None:
    """Score how similar CANDIDATE is to PREVIOUS."""
    engine: KeySmithEngine = ctx.obj["engine"]
    _handle_output(ctx, _run_async(engine.compare(previous, candidate)))


@cli.command()
@click.argument("password", required=False)
@click.pass_context
def policy(ctx: click.Context, password: Optional[str]) -> None:
    """Validate a password against the configured account policy."""
    engine: KeySmithEngine = ctx.obj["engine"]
    _handle_output(ctx, _run_async(engine.validate_policy(_prompt_password(password))))


@cli.command()
@click.pass_context
def sources(ctx: click.Context) -> None:
    """List the available random sources."""
    listing = KeySmithEngine.list_sources()
    if ctx.obj["output_format"] == "json":
        click.echo(json.dumps(listing, indent=2))
    else:
        display: KeySmithConsoleOutput = ctx.obj["display"]
        display.display_sources(listing)


@cli.command("rng-test")
@click.option("--source", "-s", type=_SOURCE_CHOICE, default=None, help="Random source.")
@click.option(
    "--samples", "-n",
    type=click.IntRange(min=1),
    default=4096,
    help="Sample size in bytes (at least 1280 for a verdict).",
)
@click.pass_context
def rng_test(ctx: click.Context, source: Optional[str], samples: int) -> None:
    """Run statistical quality tests on a random source."""
    engine: KeySmithEngine = ctx.obj["engine"]
    console: KeySmithConsole = ctx.obj["console"]
    with console.status(f"Sampling {samples:,} bytes..."):
        result = _run_async(engine.test_source(_source(ctx, source), samples))
    _handle_output(ctx, result)


# ===================================================================== #
#  Entry Point
# ===================================================================== #

def main() -> None:
    """Main entry point for the KeySmith CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
