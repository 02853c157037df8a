"""
Health checks for a profile's settings. Nothing here blocks a switch; the
results are shown next to the profile so odd configurations stand out.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from core.errors import ValidationError
from core.profile_manager import SettingsDocument
from core.validator import validate_instructions, validate_settings

KNOWN_MODELS = (
    "opus",
    "sonnet",
    "haiku",
    "claude-3-opus",
    "claude-3-sonnet",
    "claude-3-haiku",
)


@dataclass
class HealthResult:
    is_valid: bool = True
    warnings: list[str] = field(default_factory=list)
    error: str = ""

    @property
    def is_healthy(self) -> bool:
        return self.is_valid and not self.error


@dataclass
class ProfileHealthReport:
    profile: str
    overall: HealthResult = field(default_factory=HealthResult)
    settings: HealthResult = field(default_factory=HealthResult)
    model: HealthResult = field(default_factory=HealthResult)
    permissions: HealthResult = field(default_factory=HealthResult)
    env_vars: HealthResult = field(default_factory=HealthResult)

    @property
    def is_healthy(self) -> bool:
        return self.overall.is_healthy

    @property
    def total_warnings(self) -> int:
        return len(self.overall.warnings)

    @property
    def summary(self) -> str:
        if not self.is_healthy:
            return "Unhealthy"
        if self.total_warnings:
            return "Healthy (with warnings)"
        return "Healthy"


def check_profile(name: str, settings: SettingsDocument | None, instructions: str = "") -> ProfileHealthReport:
    report = ProfileHealthReport(profile=name)
    report.settings = check_settings(settings, instructions)
    if not report.settings.is_healthy:
        report.overall = HealthResult(is_valid=False, error=report.settings.error)
        return report

    report.model = check_model(settings.model)
    report.permissions = check_permissions(settings.permissions)
    report.env_vars = check_env_vars(settings.env)

    parts = (report.settings, report.model, report.permissions, report.env_vars)
    report.overall = HealthResult(
        is_valid=all(p.is_healthy for p in parts),
        warnings=[w for p in parts for w in p.warnings],
    )
    return report


def check_settings(settings: SettingsDocument | None, instructions: str = "") -> HealthResult:
    if settings is None:
        return HealthResult(is_valid=False, error="Settings cannot be empty")
    try:
        validate_settings(settings)
        validate_instructions(instructions)
    except ValidationError as e:
        return HealthResult(is_valid=False, error=str(e))

    warnings = []
    if not settings.env:
        warnings.append("No environment variables set")
    return HealthResult(warnings=warnings)


def is_known_model(model: str) -> bool:
    lowered = model.lower()
    return any(known in lowered for known in KNOWN_MODELS)


def check_model(model: str) -> HealthResult:
    if not model:
        return HealthResult(warnings=["No model specified (the tool default will be used)"])
    if not is_known_model(model):
        return HealthResult(
            warnings=[f"Unknown model '{model}' (custom models are allowed but may not work)"]
        )
    return HealthResult()


def check_permissions(perms: dict[str, Any]) -> HealthResult:
    allow = perms.get("allow") or []
    deny = perms.get("deny") or []
    warnings = []
    if "*" in allow:
        warnings.append("Wildcard (*) in allow list grants access to all tools")
    if allow and deny:
        warnings.append("Both allow and deny lists are specified (deny takes precedence)")
    return HealthResult(warnings=warnings)


def check_env_vars(env: dict[str, str]) -> HealthResult:
    warnings = [
        f"Environment variable '{key}' has empty value"
        for key, value in env.items()
        if value == ""
    ]
    return HealthResult(warnings=warnings)
