from __future__ import annotations

import csv
import io
from datetime import date, timedelta

from flask import Flask, request

from ..common.auth import AuthGuards
from ..common.errors import ok
from ..common.validators import parse_date, parse_int
from .service import REPORT_FIELDS, ReportData


def register(app: Flask, container) -> None:
    guards = AuthGuards(container.auth_service.resolve_token)

    def _range() -> tuple[date, date]:
        today = date.today()
        start = parse_date(request.args.get("start"), "start") or today - timedelta(days=7)
        end = parse_date(request.args.get("end"), "end") or today
        return start, end

    def _build() -> tuple[date, date, ReportData]:
        start, end = _range()
        data = container.payroll_report_service.build_hours_report(
            start=start,
            end=end,
            employee_id=parse_int(request.args.get("employeeId"), "employeeId", minimum=1),
        )
        return start, end, data

    @app.route("/api/payroll/hours-report", methods=["GET"], endpoint="payroll_hours_report")
    @guards.hr_required
    def hours_report(current_user):
        start, end, data = _build()
        return ok(
            {
                "start": start.isoformat(),
                "end": end.isoformat(),
                "rows": data.rows,
                "summary": data.summary,
            }
        )

    @app.route("/api/payroll/hours-report.csv", methods=["GET"], endpoint="payroll_hours_report_csv")
    @guards.hr_required
    def hours_report_csv(current_user):
        start, end, data = _build()

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        filename = f"hours_report_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
