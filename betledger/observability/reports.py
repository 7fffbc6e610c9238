"""Metrics reports: JSON snapshots of computed portfolio metrics."""

from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

from betledger.analytics.metrics_engine import MetricsResult
from betledger.observability.logger import get_logger

log = get_logger(__name__)


def write_metrics_report(
    result: MetricsResult,
    output_dir: str | Path = "reports/",
    source: str = "",
) -> Path:
    """Write ``result`` as a timestamped JSON report and return its path."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    now = dt.datetime.now(dt.timezone.utc)
    report = {
        "generated_at": now.isoformat(),
        "source": source,
        "metrics": result.to_dict(),
    }

    filepath = out / f"metrics_{now.strftime('%Y%m%dT%H%M%S%fZ')}.json"
    with open(filepath, "w") as f:
        json.dump(report, f, indent=2, default=str, allow_nan=False)

    log.info("report.generated", path=str(filepath), accounts=len(result.accounts))
    return filepath
