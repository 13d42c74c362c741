"""
Tests for the shared layer: configuration, structured logging, result
models, the HTTP client's cache and circuit breaker, and numeric helpers.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
import numpy as np
import pytest

from shared.config import KeySmithConfig, get_config
from shared.console import KeySmithConsole
from shared.logger import KeySmithLogger
from shared.math_utils import (
    bytes_to_bits,
    chi_squared_test,
    normal_cdf,
    shannon_entropy,
    upper_inc_gamma_reg,
)
from shared.models import Finding, Risk, RiskLevel, ScanResult, Severity
from shared.network import (
    CircuitBreaker,
    CircuitState,
    KeySmithHTTP,
    KeySmithHTTPError,
    ResponseCache,
)

# =============================================================================
# Configuration
# =============================================================================


class TestConfig:
    def test_defaults(self) -> None:
        config = KeySmithConfig()
        assert config.generator.default_length == 16
        assert config.analyzer.history_size == 5
        assert config.breach.debounce_seconds == 0.8
        assert config.breach.api_url == "https://api.pwnedpasswords.com"

    def test_load_toml_ignores_unknown_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "keysmith.toml"
        path.write_text(
            '[generator]\ndefault_length = 24\nunknown = "x"\n'
            "[breach]\ntimeout = 2.5\n"
            "[mystery]\nkey = 1\n",
            encoding="utf-8",
        )
        config = KeySmithConfig.load(path)
        assert config.generator.default_length == 24
        assert config.breach.timeout == 2.5
        assert config.analyzer.min_length == 12

    def test_explicit_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            KeySmithConfig.load(tmp_path / "absent.toml")

    def test_round_trip_to_dict(self) -> None:
        config = KeySmithConfig.from_dict({"global": {"debug": True}})
        data = config.to_dict()
        assert data["global_settings"]["debug"] is True
        assert data["generator"]["separator"] == "-"

    def test_get_config_caches_until_path_given(self, tmp_path: Path) -> None:
        path = tmp_path / "keysmith.toml"
        path.write_text("[analyzer]\nhistory_size = 9\n", encoding="utf-8")
        loaded = get_config(path)
        assert loaded.analyzer.history_size == 9
        assert get_config() is loaded


# =============================================================================
# Logging
# =============================================================================


class TestLogger:
    def test_logger_name_and_context(self, tmp_path: Path) -> None:
        log_file = tmp_path / "keysmith.log"
        log = KeySmithLogger(
            "test", log_level="DEBUG", log_file=log_file, json_logs=True,
            console_output=False,
        )
        assert log.underlying.name == "keysmith.test"

        with log.operation("range_lookup"):
            log.warning("Lookup failed", prefix="5BAA6")
        for handler in log.underlying.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "keysmith.test"
        assert entry["tool_name"] == "test"
        assert entry["operation"] == "range_lookup"
        assert entry["extra"] == {"prefix": "5BAA6"}

    def test_from_config_debug_overrides_level(self) -> None:
        config = KeySmithConfig.from_dict({"global": {"debug": True}})
        log = KeySmithLogger.from_config("cfg", config)
        assert log.underlying.level == logging.DEBUG

    def test_reinstantiation_does_not_duplicate_handlers(self) -> None:
        KeySmithLogger("dup")
        log = KeySmithLogger("dup")
        assert len(log.underlying.handlers) == 1

    def test_timed(self) -> None:
        log = KeySmithLogger("timer", console_output=False)
        with log.timed("work") as timer:
            pass
        assert timer.elapsed >= 0


# =============================================================================
# Result Models
# =============================================================================


class TestResultModels:
    def test_evidence_coerced_to_json(self) -> None:
        finding = Finding(
            severity=Severity.LOW, title="t", description="d", evidence={"a": 1}
        )
        assert json.loads(finding.evidence) == {"a": 1}

    @pytest.mark.parametrize(
        "score, level",
        [(0, RiskLevel.NEGLIGIBLE), (10, RiskLevel.LOW), (40, RiskLevel.MEDIUM),
         (70, RiskLevel.HIGH), (90, RiskLevel.CRITICAL)],
    )
    def test_risk_level_derived(self, score: float, level: RiskLevel) -> None:
        assert Risk(score=score).level is level

    def test_scan_result_summary(self) -> None:
        result = ScanResult(tool_name="keysmith", target="p******d")
        result.add_finding(Finding(severity=Severity.HIGH, title="a", description="b"))
        result.add_finding(Finding(severity=Severity.INFO, title="c", description="d"))
        result.finalize()
        assert result.highest_severity is Severity.HIGH
        assert result.severity_counts["HIGH"] == 1
        assert "Findings: 2" in result.summary
        assert result.duration_seconds is not None
        assert not result.has_errors

    def test_severity_style(self) -> None:
        assert Severity.CRITICAL.style == "critical"
        assert Severity.INFO.label == "Informational"


# =============================================================================
# Network
# =============================================================================


class TestNetwork:
    def test_cache_put_get_and_disable(self) -> None:
        cache = ResponseCache(default_ttl=60)
        cache.put("GET", "/range/ABCDE", "body")
        assert cache.get("get", "/range/ABCDE") == "body"
        cache.put("GET", "/range/FFFFF", "body", ttl=0)
        assert cache.get("GET", "/range/FFFFF") is None
        assert len(cache) == 1
        cache.clear()
        assert len(cache) == 0

    def test_circuit_breaker_opens_and_recovers(self) -> None:
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=0.0)
        breaker.record_failure()
        assert breaker.state is CircuitState.CLOSED
        breaker.record_failure()
        assert breaker.state is CircuitState.OPEN
        assert breaker.allow_request()
        assert breaker.state is CircuitState.HALF_OPEN
        breaker.record_success()
        assert breaker.state is CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(404)

        async with KeySmithHTTP(
            base_url="https://example.test",
            max_retries=0,
            cb_failure_threshold=1,
            cb_recovery_timeout=60,
            transport=httpx.MockTransport(handler),
        ) as http:
            with pytest.raises(KeySmithHTTPError):
                await http.fetch("/a")
            with pytest.raises(KeySmithHTTPError, match="Circuit breaker OPEN"):
                await http.fetch("/a")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_user_agent_sent(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="ok")

        async with KeySmithHTTP(
            base_url="https://example.test",
            user_agent="KeySmith-Test",
            transport=httpx.MockTransport(handler),
        ) as http:
            assert await http.fetch_text("/x") == "ok"
        assert seen[0].headers["User-Agent"] == "KeySmith-Test"


# =============================================================================
# Numeric helpers and console
# =============================================================================


class TestMathUtils:
    def test_shannon_entropy(self) -> None:
        assert shannon_entropy(b"") == 0.0
        assert shannon_entropy(b"aaaa") == 0.0
        assert shannon_entropy(bytes(range(256))) == pytest.approx(8.0)

    def test_bytes_to_bits_msb_first(self) -> None:
        assert bytes_to_bits(b"\x80").tolist() == [1, 0, 0, 0, 0, 0, 0, 0]

    def test_chi_squared_uniform(self) -> None:
        observed = np.full(256, 16.0)
        chi2, p_value = chi_squared_test(observed, observed.copy())
        assert chi2 == pytest.approx(0.0)
        assert p_value == pytest.approx(1.0)

    def test_normal_cdf_and_gamma(self) -> None:
        assert normal_cdf(0.0) == pytest.approx(0.5)
        assert upper_inc_gamma_reg(1.0, 1.0) == pytest.approx(np.exp(-1.0))


class TestConsole:
    def test_recorded_output(self) -> None:
        console = KeySmithConsole(record=True)
        console.success("done")
        console.findings_table(
            [Finding(severity=Severity.MEDIUM, title="Weak", description="Too short")]
        )
        text = console.export_text()
        assert "SUCCESS" in text
        assert "Weak" in text
