"""
KeySmith Engine
===============

Central orchestrator for KeySmith. :class:`KeySmithEngine` coordinates the
strength checker, breach checker, generators, similarity comparator,
policy validator and random source tester, and wraps every outcome in a
:class:`shared.models.ScanResult`.

Architecture follows the Facade pattern (Gamma et al., 1994). Every
public coroutine catches unexpected exceptions, logs them with a
traceback, and returns a result carrying an error finding so callers
(the CLI in particular) never crash on an analysis bug.

Raw passwords never appear in a result: ``target`` is a masked form and
``metadata`` holds only masked or derived values. Generated secrets are
the one exception, since returning them is the point of generation.

References:
    - Gamma, E., Helm, R., Johnson, R., & Vlissides, J. (1994).
      Design Patterns: Elements of Reusable Object-Oriented Software.
    - NIST SP 800-63B (2017). Digital Identity Guidelines.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from shared.config import KeySmithConfig
from shared.logger import KeySmithLogger
from shared.models import Finding, Risk, ScanResult, Severity

from keysmith.analyzers.policy import PasswordPolicy
from keysmith.analyzers.similarity import compare_passwords
from keysmith.analyzers.source_quality import SourceQualityTester
from keysmith.analyzers.strength import StrengthChecker, mask_password
from keysmith.breach.checker import BreachChecker
from keysmith.core.models import (
    BreachResult,
    PassphraseOptions,
    PasswordOptions,
    RandomSource,
    StrengthLabel,
)
from keysmith.generators.passphrase import (
    PassphraseGenerator,
    estimate_passphrase_strength,
)
from keysmith.generators.password import PasswordGenerator
from keysmith.generators.random_source import describe_sources

_TOOL_NAME = "keysmith"

_SEVERITY_BY_LABEL: dict[StrengthLabel, Severity] = {
    StrengthLabel.VERY_WEAK: Severity.CRITICAL,
    StrengthLabel.WEAK: Severity.HIGH,
    StrengthLabel.MODERATE: Severity.MEDIUM,
    StrengthLabel.STRONG: Severity.LOW,
    StrengthLabel.VERY_STRONG: Severity.INFO,
}


class KeySmithEngine:
    """Orchestrates all KeySmith operations.

    Usage::

        engine = KeySmithEngine()
        result = await engine.analyze_password("Tr0ub4dor&3", include_breach=True)
        result = await engine.generate_passwords(PasswordOptions(length=20), count=3)
        result = await engine.compare("Summer2023!", "Summer2024!")

    Attributes:
        config: KeySmith configuration instance.
        logger: Logger for the engine.
    """

    def __init__(
        self,
        config: Optional[KeySmithConfig] = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or KeySmithConfig()
        self.logger = KeySmithLogger.from_config("engine", self.config)
        self._transport = transport

        self._strength = StrengthChecker()
        self._policy = PasswordPolicy.from_config(self.config)
        self._source_tester = SourceQualityTester()

    def _new_result(self, target: str) -> ScanResult:
        return ScanResult(tool_name=_TOOL_NAME, target=target or "[empty]")

    def _fail(self, result: ScanResult, operation: str, exc: Exception) -> ScanResult:
        self.logger.exception("%s failed: %s", operation, exc)
        result.add_finding(Finding(
            title=f"{operation} failed",
            description=f"Error during {operation.lower()}: {exc}",
            severity=Severity.MEDIUM,
        ))
        return result.finalize(f"Error: {exc}")

    # ------------------------------------------------------------------ #
    #  Strength Analysis
    # ------------------------------------------------------------------ #

    async def analyze_password(
        self, password: str, *, include_breach: bool = False
    ) -> ScanResult:
        """Analyse the strength of *password*, optionally checking breaches.

        Args:
            password: The password to analyse.
            include_breach: Also run the k-anonymity breach lookup.

        Returns:
            ScanResult whose metadata holds the serialised
            :class:`StrengthResult` (and ``breach`` when requested).
        """
        result = self._new_result(mask_password(password))
        self.logger.info("Starting password analysis", length=len(password))

        try:
            with self.logger.timed("password analysis"):
                strength = self._strength.check(password)
            result.metadata = {"strength": strength.model_dump()}

            if not password:
                result.add_finding(Finding(
                    title="Empty Password",
                    description=strength.feedback.suggestions[0],
                    severity=Severity.INFO,
                ))
                return result.finalize("No password supplied.")

            severity = _SEVERITY_BY_LABEL[strength.label]
            result.add_finding(Finding(
                title=f"Password Strength: {strength.label.value}",
                description=(
                    f"Score {strength.score}/4, entropy {strength.entropy:.2f} bits, "
                    f"length {strength.length}."
                ),
                severity=severity,
                evidence={
                    "score": strength.score,
                    "entropy": round(strength.entropy, 2),
                    "penalties": strength.entropy_detail.penalties,
                },
                references=["NIST SP 800-63B (2017). Digital Identity Guidelines."],
            ))

            for pattern in strength.detected_patterns:
                result.add_finding(Finding(
                    title=f"Pattern Detected: {pattern}",
                    description=f"{pattern} make the password easier to guess.",
                    severity=Severity.LOW,
                ))

            if strength.feedback.warning:
                result.add_finding(Finding(
                    title="Guessability Warning",
                    description=strength.feedback.warning,
                    severity=Severity.MEDIUM,
                ))

            for suggestion in strength.feedback.suggestions:
                result.add_finding(Finding(
                    title="Improvement Suggestion",
                    description=suggestion,
                    severity=Severity.INFO,
                ))

            risk_score = (4 - strength.score) * 25.0
            factors = [f"label: {strength.label.value}"]

            if include_breach:
                breach = await self._lookup_breach(password)
                result.metadata["breach"] = breach.model_dump()
                self._add_breach_findings(result, breach)
                if breach.is_breached:
                    risk_score = 100.0
                    factors.append(f"breached: {breach.occurrences} occurrences")

            result.risk = Risk(score=risk_score, factors=factors)
            return result.finalize(
                f"{strength.label.value}: score {strength.score}/4, "
                f"{strength.entropy:.1f} bits"
            )

        except Exception as exc:
            return self._fail(result, "Password analysis", exc)

    # ------------------------------------------------------------------ #
    #  Breach Lookup
    # ------------------------------------------------------------------ #

    async def check_breach(self, password: str) -> ScanResult:
        """Run only the k-anonymity breach lookup for *password*."""
        result = self._new_result(mask_password(password))

        try:
            breach = await self._lookup_breach(password)
            result.metadata = {"breach": breach.model_dump()}
            self._add_breach_findings(result, breach)
            if breach.is_breached:
                result.risk = Risk(score=100.0, factors=["breached"])
                return result.finalize(
                    f"Found in {breach.occurrences:,} known breaches"
                )
            if not breach.verified:
                return result.finalize("Breach status unknown")
            result.risk = Risk(score=0.0)
            return result.finalize("Not found in known breaches")

        except Exception as exc:
            return self._fail(result, "Breach lookup", exc)

    async def _lookup_breach(self, password: str) -> BreachResult:
        async with BreachChecker(
            self.config.breach,
            logger=KeySmithLogger.from_config("breach", self.config),
            transport=self._transport,
        ) as checker:
            return await checker.check(password)

    @staticmethod
    def _add_breach_findings(result: ScanResult, breach: BreachResult) -> None:
        if breach.is_breached:
            result.add_finding(Finding(
                title="Password Found In Data Breaches",
                description=(
                    f"This password appears {breach.occurrences:,} times in "
                    "known breach corpora."
                ),
                severity=Severity.CRITICAL,
                evidence={"occurrences": breach.occurrences},
                recommendation="Choose a different password that has never been used.",
                references=["Hunt, T. (2018). Pwned Passwords V2, k-Anonymity model."],
            ))
        elif not breach.verified:
            result.add_finding(Finding(
                title="Breach Lookup Unavailable",
                description=(
                    "The breach service could not be reached; the password "
                    "was not verified against known breaches."
                ),
                severity=Severity.LOW,
            ))
        else:
            result.add_finding(Finding(
                title="Not Found In Known Breaches",
                description="The password hash suffix was not in the range response.",
                severity=Severity.INFO,
            ))

    # ------------------------------------------------------------------ #
    #  Generation
    # ------------------------------------------------------------------ #

    async def generate_passwords(
        self, options: Optional[PasswordOptions] = None, count: int = 1
    ) -> ScanResult:
        """Generate *count* passwords and rate each one."""
        options = options or PasswordOptions()
        result = self._new_result(f"password:{options.mode.value}")
        self.logger.info(
            "Generating passwords", mode=options.mode.value,
            source=options.source.value, count=count,
        )

        try:
            secrets = PasswordGenerator(options.source).generate_many(options, count)
            rated = []
            for secret in secrets:
                strength = self._strength.check(secret)
                rated.append({
                    "value": secret,
                    "length": len(secret),
                    "entropy": round(strength.entropy, 2),
                    "label": strength.label.value,
                    "score": strength.score,
                })
            result.metadata = {
                "kind": "password",
                "options": options.model_dump(),
                "secrets": rated,
            }
            self._add_source_finding(result, options.source)
            return result.finalize(
                f"Generated {len(secrets)} password(s) with {options.source.label}"
            )

        except Exception as exc:
            return self._fail(result, "Password generation", exc)

    async def generate_passphrases(
        self, options: Optional[PassphraseOptions] = None, count: int = 1
    ) -> ScanResult:
        """Generate *count* passphrases and rate each one."""
        options = options or PassphraseOptions()
        result = self._new_result("passphrase")
        self.logger.info(
            "Generating passphrases", words=options.word_count,
            source=options.source.value, count=count,
        )

        try:
            phrases = PassphraseGenerator(options.source).generate_many(options, count)
            rated = []
            for phrase in phrases:
                rating = estimate_passphrase_strength(phrase)
                rated.append({
                    "value": phrase,
                    "length": len(phrase),
                    "entropy": round(self._strength.check(phrase).entropy, 2),
                    "label": rating.label.value,
                    "score": rating.score,
                    "suggestions": rating.suggestions,
                })
            result.metadata = {
                "kind": "passphrase",
                "options": options.model_dump(),
                "secrets": rated,
            }
            self._add_source_finding(result, options.source)
            return result.finalize(
                f"Generated {len(phrases)} passphrase(s) with {options.source.label}"
            )

        except Exception as exc:
            return self._fail(result, "Passphrase generation", exc)

    @staticmethod
    def _add_source_finding(result: ScanResult, source: RandomSource) -> None:
        if source.is_secure:
            return
        result.add_finding(Finding(
            title="Predictable Random Source",
            description=source.description,
            severity=Severity.HIGH,
            recommendation=f"Use the '{RandomSource.CRYPTO.value}' source for real secrets.",
        ))

    # ------------------------------------------------------------------ #
    #  Similarity / Policy
    # ------------------------------------------------------------------ #

    async def compare(self, previous: str, candidate: str) -> ScanResult:
        """Score how similar *candidate* is to *previous*."""
        result = self._new_result(
            f"{mask_password(previous)} vs {mask_password(candidate)}"
        )

        try:
            similarity = compare_passwords(previous, candidate)
            result.metadata = {"similarity": similarity.model_dump()}

            if similarity.score > self.config.analyzer.similarity_block:
                severity = Severity.HIGH
            elif similarity.score > self.config.analyzer.similarity_warn:
                severity = Severity.MEDIUM
            else:
                severity = Severity.INFO

            result.add_finding(Finding(
                title=f"Similarity {similarity.score:.0%}",
                description=(
                    f"Passwords are {similarity.verdict}."
                    if similarity.verdict
                    else "Passwords share little structure."
                ),
                severity=severity,
                evidence={
                    "length": round(similarity.length_similarity, 3),
                    "type": round(similarity.type_similarity, 3),
                    "substring": round(similarity.substring_similarity, 3),
                    "pattern": similarity.pattern_similarity,
                },
            ))
            result.risk = Risk(score=max(0.0, min(100.0, similarity.score * 100)))
            return result.finalize(
                f"Similarity {similarity.score:.2f}"
                + (f" ({similarity.verdict})" if similarity.verdict else "")
            )

        except Exception as exc:
            return self._fail(result, "Similarity comparison", exc)

    async def validate_policy(self, password: str, *, remember: bool = False) -> ScanResult:
        """Validate *password* against the configured account policy.

        With *remember* set, a valid password is added to the engine's
        in-memory history.
        """
        result = self._new_result(mask_password(password))

        try:
            policy = self._policy.validate(password)
            result.metadata = {"policy": policy.model_dump()}
            for error in policy.errors:
                result.add_finding(Finding(
                    title="Policy Violation", description=error, severity=Severity.HIGH,
                ))
            for warning in policy.warnings:
                result.add_finding(Finding(
                    title="Policy Warning", description=warning, severity=Severity.MEDIUM,
                ))
            if policy.is_valid and remember:
                self._policy.remember(password)
            return result.finalize(
                "Password meets policy" if policy.is_valid else "Password rejected by policy"
            )

        except Exception as exc:
            return self._fail(result, "Policy validation", exc)

    # ------------------------------------------------------------------ #
    #  Random Sources
    # ------------------------------------------------------------------ #

    @staticmethod
    def list_sources() -> list[dict[str, Any]]:
        return describe_sources()

    async def test_source(
        self, source: RandomSource = RandomSource.CRYPTO, sample_bytes: int = 4096
    ) -> ScanResult:
        """Run the statistical quality suite on *source*."""
        result = self._new_result(f"source:{source.value}")
        self.logger.info("Testing random source", source=source.value, bytes=sample_bytes)

        try:
            with self.logger.timed(f"source test {source.value}"):
                report = self._source_tester.run(source, sample_bytes)
            result.metadata = {"source_quality": report.model_dump()}

            for test in report.tests:
                result.add_finding(Finding(
                    title=f"{test.test_name}: {'PASS' if test.passed else 'FAIL'}",
                    description=test.description or test.test_name,
                    severity=Severity.INFO if test.passed else Severity.HIGH,
                    evidence={"p_value": test.p_value, "statistic": test.statistic},
                    references=["NIST SP 800-22 Rev. 1a (2010)."],
                ))
            self._add_source_finding(result, source)
            return result.finalize(report.assessment)

        except Exception as exc:
            return self._fail(result, "Source quality test", exc)
