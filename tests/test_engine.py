"""
Tests for the KeySmith engine facade.
"""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from keysmith.core.engine import KeySmithEngine
from keysmith.core.models import (
    GenerationMode,
    PassphraseOptions,
    PasswordOptions,
    RandomSource,
)
from shared.config import KeySmithConfig
from shared.models import RiskLevel, Severity

SUFFIX = "1E4C9B93F3F0682250B6CF8331B7EE68FD8"


@pytest.fixture
def engine(fast_config: KeySmithConfig, range_transport) -> KeySmithEngine:
    transport, _ = range_transport(f"{SUFFIX}:42")
    return KeySmithEngine(fast_config, transport=transport)


# =============================================================================
# Strength Analysis
# =============================================================================


class TestAnalyzePassword:
    @pytest.mark.asyncio
    async def test_weak_password(self, engine: KeySmithEngine) -> None:
        result = await engine.analyze_password("password")
        assert result.target == "p******d"
        assert result.findings[0].severity is Severity.CRITICAL
        assert result.risk is not None and result.risk.level is RiskLevel.CRITICAL
        assert result.metadata["strength"]["score"] == 0
        assert "breach" not in result.metadata
        assert result.end_time is not None

    @pytest.mark.asyncio
    async def test_raw_password_never_in_result(self, engine: KeySmithEngine) -> None:
        secret = "Vq7#mZ2!pLx9&Rt4"
        result = await engine.analyze_password(secret, include_breach=True)
        assert secret not in result.model_dump_json()

    @pytest.mark.asyncio
    async def test_with_breach(self, engine: KeySmithEngine) -> None:
        result = await engine.analyze_password("password", include_breach=True)
        assert result.metadata["breach"]["occurrences"] == 42
        assert any(f.title == "Password Found In Data Breaches" for f in result.findings)
        assert result.risk.score == 100.0

    @pytest.mark.asyncio
    async def test_empty_password(self, engine: KeySmithEngine) -> None:
        result = await engine.analyze_password("")
        assert result.target == "[empty]"
        assert result.findings[0].title == "Empty Password"
        assert not result.has_errors

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_finding(self, engine: KeySmithEngine) -> None:
        with patch.object(engine._strength, "check", side_effect=RuntimeError("boom")):
            result = await engine.analyze_password("anything")
        assert result.has_errors
        assert result.findings[-1].title == "Password analysis failed"
        assert "boom" in result.summary


# =============================================================================
# Breach
# =============================================================================


class TestCheckBreach:
    @pytest.mark.asyncio
    async def test_breached(self, engine: KeySmithEngine) -> None:
        result = await engine.check_breach("password")
        assert result.highest_severity is Severity.CRITICAL
        assert "42" in result.summary

    @pytest.mark.asyncio
    async def test_unreachable_service(self, fast_config: KeySmithConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        engine = KeySmithEngine(fast_config, transport=httpx.MockTransport(handler))
        result = await engine.check_breach("password")
        assert result.metadata["breach"]["verified"] is False
        assert result.summary == "Breach status unknown"
        assert not result.has_errors


# =============================================================================
# Generation
# =============================================================================


class TestGeneration:
    @pytest.mark.asyncio
    async def test_generate_passwords(self, engine: KeySmithEngine) -> None:
        result = await engine.generate_passwords(PasswordOptions(length=20), count=3)
        secrets = result.metadata["secrets"]
        assert len(secrets) == 3
        assert all(len(s["value"]) == 20 for s in secrets)
        assert result.findings == []

    @pytest.mark.asyncio
    async def test_pseudo_source_is_flagged(self, engine: KeySmithEngine) -> None:
        options = PasswordOptions(mode=GenerationMode.MEMORABLE, source=RandomSource.PSEUDO)
        result = await engine.generate_passwords(options)
        assert result.findings[0].title == "Predictable Random Source"

    @pytest.mark.asyncio
    async def test_invalid_count_is_reported(self, engine: KeySmithEngine) -> None:
        result = await engine.generate_passwords(PasswordOptions(), count=0)
        assert result.has_errors

    @pytest.mark.asyncio
    async def test_generate_passphrases(self, engine: KeySmithEngine) -> None:
        options = PassphraseOptions(word_count=5, separator="_")
        result = await engine.generate_passphrases(options, count=2)
        secrets = result.metadata["secrets"]
        assert len(secrets) == 2
        assert all(len(s["value"].split("_")) == 5 for s in secrets)
        assert result.metadata["kind"] == "passphrase"


# =============================================================================
# Similarity, policy and sources
# =============================================================================


class TestCompareAndPolicy:
    @pytest.mark.asyncio
    async def test_compare_too_similar(self, engine: KeySmithEngine) -> None:
        result = await engine.compare("Summer2023!", "Summer2024!")
        assert result.findings[0].severity is Severity.HIGH
        assert "too similar" in result.summary
        assert "Summer" not in result.target

    @pytest.mark.asyncio
    async def test_compare_unrelated(self, engine: KeySmithEngine) -> None:
        result = await engine.compare("abc12345", "xyz99999")
        assert result.findings[0].severity is Severity.INFO
        assert result.metadata["similarity"]["verdict"] is None

    @pytest.mark.asyncio
    async def test_policy_history(self, engine: KeySmithEngine) -> None:
        secret = "Vq7#mZ2!pLx9&Rt4"
        first = await engine.validate_policy(secret, remember=True)
        assert first.metadata["policy"]["is_valid"]
        second = await engine.validate_policy(secret)
        assert "Password has been used recently" in second.metadata["policy"]["errors"]

    def test_list_sources(self) -> None:
        assert KeySmithEngine.list_sources()[0]["source"] == "crypto"

    @pytest.mark.asyncio
    async def test_source_quality(self, engine: KeySmithEngine) -> None:
        result = await engine.test_source(RandomSource.PSEUDO, 4096)
        report = result.metadata["source_quality"]
        assert report["is_secure"] is False
        assert len(report["tests"]) == 4
        assert any(f.title == "Predictable Random Source" for f in result.findings)
