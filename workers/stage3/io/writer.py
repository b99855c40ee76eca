"""
Writer — serialize the build report to JSON.

Filesystem layout per build:
    <output>/stage3_report.json
"""
import json
from pathlib import Path

from stage3.io.schema import BuildReport

REPORT_FILENAME = "stage3_report.json"


def write_report(report: BuildReport, output_dir: Path) -> Path:
    """
    Write stage3_report.json into *output_dir*.

    Creates *output_dir* if it does not exist.
    Returns the report path.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    report_path = output_dir / REPORT_FILENAME
    report_path.write_text(
        json.dumps(
            report.model_dump(mode="json"),
            indent=2,
            sort_keys=True,
        )
        + "\n"
    )
    return report_path
