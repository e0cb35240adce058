"""File renderings of a club's analytics for download."""

from __future__ import annotations

import csv
import io

import pandas as pd

from .model import AnalyticsResult

TREND_COLUMNS = ["date", "title", "type", "rate", "present", "total"]

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def to_csv(result: AnalyticsResult) -> bytes:
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=TREND_COLUMNS)
    writer.writeheader()
    for point in result.trend_data:
        writer.writerow(point.to_dict())
    # BOM so Excel opens it as UTF-8
    return out.getvalue().encode("utf-8-sig")


def to_xlsx(result: AnalyticsResult) -> bytes:
    summary = pd.DataFrame(
        [
            {"metric": "Members", "value": result.member_count},
            {"metric": "Sessions", "value": result.session_count},
            {"metric": "Events", "value": result.event_count},
            {"metric": "Average attendance (%)", "value": result.average_attendance},
        ]
    )
    trend = pd.DataFrame([p.to_dict() for p in result.trend_data], columns=TREND_COLUMNS)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        summary.to_excel(writer, index=False, sheet_name="Summary")
        trend.to_excel(writer, index=False, sheet_name="Trend")
    return output.getvalue()
