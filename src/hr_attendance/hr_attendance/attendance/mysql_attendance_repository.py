from __future__ import annotations

import logging
from datetime import date
from typing import Mapping, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, is_duplicate_key, load_json, to_float
from .model import AttendanceRecord, AttendanceReportRow, DeviceInfo, GeoLocation, NewAttendance, Page
from .repository import AttendanceRepository
from .schemas import AttendanceQuery

logger = logging.getLogger(__name__)

_COLUMNS = """
    attendance_id, employee_id, work_date, check_in, check_out, status,
    total_hours, regular_hours, overtime_hours, break_hours, notes, shift_id, is_remote,
    check_in_selfie, check_out_selfie, check_in_location, check_out_location, device_info,
    ip_address, created_by, created_at, updated_at
"""


def _location_json(loc: Optional[GeoLocation]) -> Optional[str]:
    return dump_json(loc.to_dict()) if loc else None


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        status=AttendanceStatus(r["status"]),
        total_hours=to_float(r.get("total_hours")),
        regular_hours=to_float(r.get("regular_hours")),
        overtime_hours=to_float(r.get("overtime_hours")),
        break_hours=to_float(r.get("break_hours")),
        notes=r.get("notes"),
        shift_id=r.get("shift_id"),
        is_remote=bool(r.get("is_remote")),
        check_in_selfie=r.get("check_in_selfie"),
        check_out_selfie=r.get("check_out_selfie"),
        check_in_location=GeoLocation.from_dict(load_json(r.get("check_in_location"))),
        check_out_location=GeoLocation.from_dict(load_json(r.get("check_out_location"))),
        device_info=DeviceInfo.from_dict(load_json(r.get("device_info"))),
        ip_address=r.get("ip_address"),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, new: NewAttendance) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, check_in, check_out, status,
                        total_hours, regular_hours, overtime_hours, break_hours,
                        notes, shift_id, is_remote, check_in_selfie, check_out_selfie,
                        check_in_location, check_out_location, device_info, ip_address, created_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        new.employee_id,
                        new.work_date,
                        new.check_in,
                        new.check_out,
                        new.status.value,
                        new.hours.total_hours,
                        new.hours.regular_hours,
                        new.hours.overtime_hours,
                        new.hours.break_hours,
                        new.notes,
                        new.shift_id,
                        int(new.is_remote),
                        new.check_in_selfie,
                        new.check_out_selfie,
                        _location_json(new.check_in_location),
                        _location_json(new.check_out_location),
                        dump_json(new.device_info.to_dict()) if new.device_info else None,
                        new.ip_address,
                        new.created_by,
                    ),
                )
                attendance_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                logger.info("Duplicate attendance for employee=%s date=%s", new.employee_id, new.work_date)
                raise ConflictError(
                    "Attendance already marked for this date", code="ATTENDANCE_EXISTS", http_status=409
                )
            raise

        record = self.get_by_id(attendance_id)
        if record is None:
            raise RuntimeError(f"Attendance {attendance_id} vanished after insert")
        return record

    def save(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in=%s, check_out=%s, status=%s,
                    total_hours=%s, regular_hours=%s, overtime_hours=%s, break_hours=%s,
                    notes=%s, shift_id=%s, is_remote=%s,
                    check_in_selfie=%s, check_out_selfie=%s,
                    check_in_location=%s, check_out_location=%s
                WHERE attendance_id=%s
                """,
                (
                    record.check_in,
                    record.check_out,
                    record.status.value,
                    record.total_hours,
                    record.regular_hours,
                    record.overtime_hours,
                    record.break_hours,
                    record.notes,
                    record.shift_id,
                    int(record.is_remote),
                    record.check_in_selfie,
                    record.check_out_selfie,
                    _location_json(record.check_in_location),
                    _location_json(record.check_out_location),
                    int(record.attendance_id),
                ),
            )
            # rowcount is 0 when nothing changed; existence is what matters here.
            return cur.rowcount > 0 or self._exists(cur, record.attendance_id)

    @staticmethod
    def _exists(cur, attendance_id: int) -> bool:
        cur.execute("SELECT 1 AS found FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
        return fetchone(cur) is not None

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def list(self, query: AttendanceQuery) -> Page:
        clauses: list[str] = []
        params: list[object] = []

        if query.employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(query.employee_id))
        if query.start_date is not None and query.end_date is not None:
            clauses.append("work_date BETWEEN %s AND %s")
            params.extend([query.start_date, query.end_date])
        if query.status is not None:
            clauses.append("status=%s")
            params.append(query.status.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                {where}
                ORDER BY work_date DESC, attendance_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(query.limit), int(query.offset)),
            )
            items = [_to_record(r) for r in fetchall(cur)]

        return Page(items=items, page=query.page, limit=query.limit, total=total)

    def status_counts(self, *, start_date: Optional[date], end_date: Optional[date]) -> Mapping[AttendanceStatus, int]:
        where = ""
        params: tuple = ()
        if start_date is not None and end_date is not None:
            where = "WHERE work_date BETWEEN %s AND %s"
            params = (start_date, end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT status, COUNT(*) AS n FROM attendance_records {where} GROUP BY status", params)
            return {AttendanceStatus(r["status"]): int(r["n"]) for r in fetchall(cur)}

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if employee_id is not None:
            clauses.append("ar.employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    e.employee_id, e.employee_code, e.department,
                    u.first_name, u.last_name,
                    ar.work_date, ar.check_in, ar.check_out, ar.status,
                    ar.total_hours, ar.regular_hours, ar.overtime_hours, ar.break_hours
                FROM attendance_records ar
                JOIN employees e ON e.employee_id = ar.employee_id
                JOIN users u ON u.user_id = e.user_id
                WHERE {where}
                ORDER BY ar.work_date DESC, e.employee_code ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceReportRow(
                    employee_id=int(r["employee_id"]),
                    employee_code=r["employee_code"],
                    full_name=f"{r['first_name']} {r['last_name']}".strip(),
                    department=r.get("department"),
                    work_date=r["work_date"],
                    check_in=r.get("check_in"),
                    check_out=r.get("check_out"),
                    status=AttendanceStatus(r["status"]),
                    total_hours=to_float(r.get("total_hours")),
                    regular_hours=to_float(r.get("regular_hours")),
                    overtime_hours=to_float(r.get("overtime_hours")),
                    break_hours=to_float(r.get("break_hours")),
                )
                for r in rows
            ]
