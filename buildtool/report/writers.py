"""
Report emitters for lint results: HTML, XML, SARIF and plain text.
"""
import html
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from lxml import etree
from lxml.etree import _Element

from ..core.enums import ReportFormat, Severity
from ..core.models import LintPolicy, LintReport

logger = logging.getLogger(__name__)

_SARIF_LEVELS = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFORMATIONAL: "note",
}


def _display_path(source_path: Optional[str], absolute_paths: bool) -> str:
    if not source_path:
        return ""
    if absolute_paths:
        return str(Path(source_path).resolve())
    return os.path.relpath(source_path)


def _summary(report: LintReport) -> str:
    counts = report.counts()
    return (
        f"{counts['error']} errors, {counts['warning']} warnings, "
        f"{counts['informational']} informational"
    )


def render_text(report: LintReport, absolute_paths: bool = True) -> str:
    path = _display_path(report.source_path, absolute_paths)
    if report.skipped:
        return f"Lint skipped for variant {report.variant}\n"

    lines = []
    for finding in report.findings:
        prefix = f"{path}: " if path else ""
        lines.append(
            f"{prefix}{finding.location}: {finding.severity.value.capitalize()}: "
            f"{finding.message} [{finding.rule_id}]"
        )
        if finding.explanation:
            lines.append(f"    {finding.explanation}")
    lines.append(f"Variant {report.variant}: {_summary(report)}")
    return "\n".join(lines) + "\n"


def render_xml(report: LintReport, absolute_paths: bool = True) -> str:
    path = _display_path(report.source_path, absolute_paths)

    root: _Element = etree.Element("issues", {"format": "6", "by": "buildtool", "variant": report.variant})
    for finding in report.findings:
        attributes = {
            "id": finding.rule_id,
            "severity": finding.severity.value.capitalize(),
            "message": finding.message,
            "category": finding.category.value,
            "summary": finding.summary or finding.rule_id,
        }
        if finding.explanation:
            attributes["explanation"] = finding.explanation
        issue = etree.SubElement(root, "issue", attributes)
        etree.SubElement(issue, "location", {"file": path, "path": finding.location})
    return etree.tostring(root, pretty_print=True, xml_declaration=True, encoding="UTF-8").decode("utf-8")


def render_sarif(report: LintReport, absolute_paths: bool = True) -> str:
    from .. import __version__

    path = _display_path(report.source_path, absolute_paths)

    # first finding per rule carries the rule metadata
    first_findings = {}
    for finding in report.findings:
        first_findings.setdefault(finding.rule_id, finding)
    used_rules = sorted(first_findings)

    sarif_rules = []
    for rule_id in used_rules:
        finding = first_findings[rule_id]
        entry = {"id": rule_id, "properties": {"category": finding.category.value}}
        if finding.summary:
            entry["shortDescription"] = {"text": finding.summary}
        if finding.explanation:
            entry["fullDescription"] = {"text": finding.explanation}
        sarif_rules.append(entry)

    results = []
    for finding in report.findings:
        location = {"logicalLocations": [{"fullyQualifiedName": finding.location}]}
        if path:
            location["physicalLocation"] = {"artifactLocation": {"uri": Path(path).as_posix()}}
        results.append({
            "ruleId": finding.rule_id,
            "ruleIndex": used_rules.index(finding.rule_id),
            "level": _SARIF_LEVELS[finding.severity],
            "message": {"text": finding.message},
            "locations": [location],
        })

    document = {
        "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
        "version": "2.1.0",
        "runs": [{
            "tool": {"driver": {"name": "buildtool", "version": __version__, "rules": sarif_rules}},
            "properties": {"variant": report.variant, "skipped": report.skipped},
            "results": results,
        }],
    }
    return json.dumps(document, indent=2)


def render_html(report: LintReport, absolute_paths: bool = True) -> str:
    path = _display_path(report.source_path, absolute_paths)
    rows = []
    for finding in report.findings:
        explanation = f"<br><small>{html.escape(finding.explanation)}</small>" if finding.explanation else ""
        rows.append(
            "<tr class=\"{sev}\"><td>{sev_label}</td><td>{rule}</td><td>{category}</td>"
            "<td><code>{location}</code></td><td>{message}{explanation}</td></tr>".format(
                sev=finding.severity.value,
                sev_label=finding.severity.value.capitalize(),
                rule=html.escape(finding.rule_id),
                category=html.escape(finding.category.value),
                location=html.escape(finding.location),
                message=html.escape(finding.message),
                explanation=explanation,
            )
        )

    body = (
        "<table><thead><tr><th>Severity</th><th>Rule</th><th>Category</th>"
        "<th>Location</th><th>Message</th></tr></thead><tbody>\n"
        + "\n".join(rows)
        + "\n</tbody></table>"
    ) if rows else "<p>No issues found.</p>"
    if report.skipped:
        body = "<p>Lint was skipped for this variant.</p>"

    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        f"<title>Lint Report: {html.escape(report.variant)}</title>"
        "<style>.error td:first-child{color:#c00}.warning td:first-child{color:#b60}"
        "table{border-collapse:collapse}td,th{border:1px solid #ccc;padding:4px}</style>"
        "</head><body>\n"
        f"<h1>Lint Report: {html.escape(report.variant)}</h1>\n"
        f"<p>{html.escape(path)}</p>\n"
        f"<p>{_summary(report)}</p>\n"
        f"{body}\n</body></html>\n"
    )


_RENDERERS = {
    ReportFormat.HTML: render_html,
    ReportFormat.XML: render_xml,
    ReportFormat.SARIF: render_sarif,
    ReportFormat.TEXT: render_text,
}


def _variant_path(path: str, variant: str) -> Path:
    # lint-results.html -> lint-results-release.html
    target = Path(path)
    return target.with_name(f"{target.stem}-{variant}{target.suffix}")


def write_reports(report: LintReport, policy: LintPolicy, per_variant: bool = False) -> Dict[ReportFormat, Path]:
    """
    Write every enabled report format to its configured output path.

    Args:
        report: Lint report to write
        policy: Policy holding the output flags and paths
        per_variant: Insert the variant name into each file name

    Returns:
        Dict mapping report format to the written path
    """
    written = {}
    for report_format, output in policy.outputs().items():
        target = _variant_path(output, report.variant) if per_variant else Path(output)
        target.parent.mkdir(parents=True, exist_ok=True)
        content = _RENDERERS[report_format](report, absolute_paths=policy.absolute_paths)
        with open(target, 'w', encoding='utf-8') as f:
            f.write(content)
        written[report_format] = target
        logger.info(f"Wrote {report_format.value} report to {target}")
    return written
