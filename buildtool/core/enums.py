from enum import Enum


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFORMATIONAL = "informational"

    @property
    def rank(self) -> int:
        """Higher rank is more severe"""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.ERROR: 3,
    Severity.WARNING: 2,
    Severity.INFORMATIONAL: 1,
}


class DependencyScope(str, Enum):
    IMPLEMENTATION = "implementation"
    API = "api"
    COMPILE_ONLY = "compileOnly"
    RUNTIME_ONLY = "runtimeOnly"
    TEST = "testImplementation"
    ANDROID_TEST = "androidTestImplementation"


class RuleCategory(str, Enum):
    CORRECTNESS = "Correctness"
    SECURITY = "Security"
    PERFORMANCE = "Performance"
    COMPATIBILITY = "Compatibility"
    DEPENDENCIES = "Dependencies"


class ReportFormat(str, Enum):
    HTML = "html"
    XML = "xml"
    SARIF = "sarif"
    TEXT = "text"


class ResolutionReason(str, Enum):
    SINGLE = "single"
    HIGHEST = "highest"
    OVERRIDE = "override"
