from decimal import Decimal

from src.hr_attendance.hr_attendance.database.mysql_base import load_json, to_float


def test_to_float_handles_decimal_columns():
    assert to_float(Decimal("7.50")) == 7.5
    assert isinstance(to_float(Decimal("1")), float)
    assert to_float(3) == 3.0
    assert to_float(None) is None


def test_load_json_accepts_bytes_and_decoded_values():
    assert load_json(b'{"latitude": 10.5}') == {"latitude": 10.5}
    assert load_json({"a": 1}) == {"a": 1}
    assert load_json("") is None
