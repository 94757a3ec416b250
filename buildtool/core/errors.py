"""
Error taxonomy for build configuration resolution.
"""
from typing import Iterable, Sequence, Tuple


class BuildConfigError(ValueError):
    """Base class for every error the pipeline surfaces to the caller"""


class MalformedConfig(BuildConfigError):
    """Raised when a project description is missing fields or has invalid values"""

    def __init__(self, message: str, field: str = None):
        if field:
            message = f"{field}: {message}"
        super().__init__(message)
        self.field = field


class CyclicVariantInheritance(BuildConfigError):
    """Raised when an init_with chain revisits a variant"""

    def __init__(self, chain: Sequence[str]):
        self.chain: Tuple[str, ...] = tuple(chain)
        super().__init__(
            f"Cyclic variant inheritance: {' -> '.join(self.chain)}"
        )


class UnresolvedConflict(BuildConfigError):
    """Raised when incompatible major versions are declared without an override"""

    def __init__(self, key: Tuple[str, str], versions: Iterable[str]):
        self.key = key
        self.versions: Tuple[str, ...] = tuple(versions)
        super().__init__(
            f"Unresolved version conflict for {key[0]}:{key[1]}: "
            f"{', '.join(self.versions)} (add a dependency_overrides entry to pin one)"
        )


class PolicyViolation(BuildConfigError):
    """Raised when lint reports error-severity findings and abort_on_error is set"""

    def __init__(self, report):
        self.report = report
        errors = report.errors()
        rules = sorted({finding.rule_id for finding in errors})
        super().__init__(
            f"Lint found {len(errors)} error(s) in variant '{report.variant}': "
            f"{', '.join(rules)}"
        )
