import datetime as dt
import json
from decimal import Decimal

import numpy as np
import pytest

from cashflow.analytics.common import dsum, format_brl, sanitize_for_json
from cashflow.data.schemas import Status


@pytest.mark.parametrize("value, wire", [
    (Decimal("0.30"), "0.3"),
    (Decimal("0.1") + Decimal("0.2"), "0.3"),
    (Decimal("1.005"), "1.01"),
    (Decimal("123456789012.34"), "123456789012.34"),
    (Decimal("-14400"), "-14400.0"),
])
def test_decimals_serialize_as_cents(value, wire):
    assert json.dumps(sanitize_for_json({"v": value})) == f'{{"v": {wire}}}'


def test_ledger_sum_is_cent_exact_on_the_wire(ledger):
    total = dsum(t.value_paid for t in ledger)
    assert json.dumps(sanitize_for_json(total)) == "1.45"


def test_sanitize_nested_values():
    out = sanitize_for_json({
        "status": Status.PAID,
        "when": dt.date(2024, 6, 30),
        "rows": (np.int64(3), np.float64("nan"), None),
    })
    assert out == {"status": "Pago", "when": "2024-06-30", "rows": [3, 0.0, None]}


def test_format_brl():
    assert format_brl(Decimal("1234.5")).endswith("1.234,50")
