"""Plain-text, JSON and CSV renderings of knowledge-base entries."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence

from baseline_lens.analysis.schemas import FeatureDetails

NAME_WIDTH = 40
STATUS_WIDTH = 20
DESCRIPTION_WIDTH = 40
TABLE_WIDTH = 80


def format_feature_info(feature: FeatureDetails, fmt: str = "table") -> str:
    if fmt.lower() == "json":
        return json.dumps(
            feature.model_dump(by_alias=True, mode="json"), indent=2
        )
    return _feature_as_table(feature)


def format_feature_list(
    features: Sequence[FeatureDetails], fmt: str = "table"
) -> str:
    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps(
            [f.model_dump(by_alias=True, mode="json") for f in features],
            indent=2,
        )
    if fmt == "csv":
        return _features_as_csv(features)
    return _features_as_table(features)


def _feature_as_table(feature: FeatureDetails) -> str:
    lines = [
        f"Feature: {feature.name}",
        f"Key: {feature.key}",
        f"Description: {feature.description or 'N/A'}",
        f"Status: {feature.baseline_status}",
    ]
    if feature.baseline_date:
        lines.append(f"Baseline Date: {feature.baseline_date}")
    if feature.support:
        versions = ", ".join(
            f"{browser} {version or '-'}"
            for browser, version in feature.support.items()
        )
        lines.append(f"Support: {versions}")
    if feature.mdn_url:
        lines.append(f"MDN: {feature.mdn_url}")
    if feature.spec_url:
        lines.append(f"Spec: {feature.spec_url}")
    return "\n".join(lines)


def _features_as_table(features: Sequence[FeatureDetails]) -> str:
    if not features:
        return "No features found."

    lines = [
        "Name".ljust(NAME_WIDTH) + "Status".ljust(STATUS_WIDTH) + "Description",
        "-" * TABLE_WIDTH,
    ]
    for feature in features:
        name = feature.name[: NAME_WIDTH - 1].ljust(NAME_WIDTH)
        status = str(feature.baseline_status).ljust(STATUS_WIDTH)
        description = feature.description[:DESCRIPTION_WIDTH]
        lines.append(f"{name}{status}{description}".rstrip())
    return "\n".join(lines)


def _features_as_csv(features: Sequence[FeatureDetails]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(["Name", "Status", "Description", "MDN URL", "Spec URL"])
    for feature in features:
        writer.writerow(
            [
                feature.name,
                feature.baseline_status,
                feature.description,
                feature.mdn_url or "",
                feature.spec_url or "",
            ]
        )
    return buf.getvalue().rstrip("\n")
