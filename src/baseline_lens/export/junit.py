"""JUnit XML export — one testcase per grouped feature.

High-risk features are failures, medium-risk features carry a
``system-out`` note, low-risk features pass.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from baseline_lens.constants import JUNIT_SUITE_NAME, RiskLevel
from baseline_lens.report import CompatibilityReport

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def export_junit(report: CompatibilityReport) -> str:
    suite = ET.Element(
        "testsuite",
        {
            "name": JUNIT_SUITE_NAME,
            "tests": str(len(report.features)),
            "failures": "0",
            "errors": "0",
            "time": "0",
            "timestamp": report.generated_at.isoformat(),
        },
    )

    failures = 0
    for usage in report.features:
        case = ET.SubElement(
            suite,
            "testcase",
            {
                "classname": JUNIT_SUITE_NAME,
                "name": f"compatibility.{'_'.join(usage.name.split())}",
                "time": "0",
            },
        )
        if usage.risk_level == RiskLevel.HIGH:
            failures += 1
            locations = ", ".join(
                f"{loc.file_path}:{loc.line + 1}" for loc in usage.locations
            )
            failure = ET.SubElement(
                case,
                "failure",
                {
                    "message": f"High-risk feature detected: {usage.name}",
                    "type": "CompatibilityError",
                },
            )
            failure.text = (
                f"Feature: {usage.name}\n"
                f"Key: {usage.feature_key}\n"
                f"Status: {usage.baseline_status}\n"
                f"Locations: {locations}"
            )
        elif usage.risk_level == RiskLevel.MEDIUM:
            out = ET.SubElement(case, "system-out")
            out.text = (
                f"Medium-risk feature: {usage.name} "
                f"({usage.baseline_status})"
            )

    suite.set("failures", str(failures))
    ET.indent(suite)
    return XML_DECLARATION + ET.tostring(suite, encoding="unicode")
