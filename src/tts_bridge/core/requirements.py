"""
Provider SDK Requirement Checks.

Each cloud driver depends on a vendor SDK that may not be installed in
every environment. Before a driver is constructed, the manager checks
that its SDK is importable and fails early with the pip command to run.

Usage:
    from tts_bridge.core.requirements import check_requirements, ensure_driver_ready

    result = check_requirements("google")
    if not result.satisfied:
        print(result.message)

    ensure_driver_ready("polly")  # raises ConfigurationError if boto3 is missing

Environment Variables:
    TTS_BRIDGE_SKIP_SETUP=1  - Skip SDK checks (for tests with injected clients)
"""
from __future__ import annotations

import importlib.util
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from tts_bridge.core.errors import ConfigurationError


@dataclass
class DriverRequirements:
    """
    SDK requirements of one driver.

    Attributes:
        name: Driver identifier ("polly", "google").
        display_name: Human-readable provider name.
        pip_packages: Packages to install.
        check_imports: Modules that must be importable.
        notes: Setup notes shown by the CLI.
    """
    name: str
    display_name: str
    pip_packages: List[str] = field(default_factory=list)
    check_imports: List[str] = field(default_factory=list)
    notes: str = ""


@dataclass
class RequirementResult:
    """Result of a requirement check."""
    driver: str
    satisfied: bool
    message: str
    missing_packages: List[str] = field(default_factory=list)


DRIVER_REGISTRY: Dict[str, DriverRequirements] = {
    "polly": DriverRequirements(
        name="polly",
        display_name="Amazon Polly",
        pip_packages=["boto3"],
        check_imports=["boto3"],
        notes="Credentials come from tts.services.polly.credentials or the "
              "default AWS credential chain.",
    ),
    "google": DriverRequirements(
        name="google",
        display_name="Google Cloud Text-to-Speech",
        pip_packages=["google-cloud-texttospeech", "google-auth"],
        check_imports=["google.cloud.texttospeech", "google.oauth2.service_account"],
        notes="Credentials come from tts.services.google.credentials or "
              "GOOGLE_APPLICATION_CREDENTIALS.",
    ),
    "null": DriverRequirements(
        name="null",
        display_name="Null (no-op)",
        notes="Performs no synthesis. Used when no driver is configured.",
    ),
}


def is_module_available(module_name: str) -> bool:
    """Whether a (possibly dotted) module can be imported, without importing it."""
    try:
        return importlib.util.find_spec(module_name) is not None
    except (ImportError, ValueError):
        # find_spec imports parent packages; a missing parent raises.
        return False


def get_driver_info(driver: str) -> Optional[DriverRequirements]:
    return DRIVER_REGISTRY.get(driver)


def check_requirements(driver: str) -> RequirementResult:
    """
    Check whether the SDK for ``driver`` is installed.

    Drivers not listed in the registry (custom drivers registered with
    ``DriverManager.extend``) are reported as satisfied.
    """
    reqs = DRIVER_REGISTRY.get(driver)
    if reqs is None:
        return RequirementResult(driver=driver, satisfied=True, message=f"{driver}: no known requirements")

    missing = [mod for mod in reqs.check_imports if not is_module_available(mod)]
    if missing:
        command = "pip install " + " ".join(reqs.pip_packages)
        return RequirementResult(
            driver=driver,
            satisfied=False,
            message=f"Please install the {reqs.display_name} SDK using `{command}`.",
            missing_packages=list(reqs.pip_packages),
        )

    return RequirementResult(driver=driver, satisfied=True, message=f"{reqs.display_name} is ready")


def ensure_driver_ready(driver: str) -> None:
    """
    Raise ConfigurationError if the SDK for ``driver`` is missing.

    Skipped entirely when TTS_BRIDGE_SKIP_SETUP=1.
    """
    if os.getenv("TTS_BRIDGE_SKIP_SETUP") == "1":
        return
    result = check_requirements(driver)
    if not result.satisfied:
        raise ConfigurationError(result.message, details={"missing_packages": result.missing_packages})


def driver_status() -> List[RequirementResult]:
    """Requirement results for every known driver, in registry order."""
    return [check_requirements(name) for name in DRIVER_REGISTRY]
