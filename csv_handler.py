"""
CSV export for WeddingLedger lists
"""
from __future__ import annotations
import json
from dataclasses import asdict
from typing import Any, Dict, List

from config import camel_case
from errors import ValidationError
from models import GiftItem, Guest, Transaction


def _blank_nulls(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, dict):
        return {k: _blank_nulls(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_blank_nulls(v) for v in value]
    return value


def _cell(record: Dict[str, Any], key: str) -> str:
    if key not in record:
        return ""
    return json.dumps(_blank_nulls(record[key]), ensure_ascii=False)


def export_to_csv(records: List[Dict[str, Any]], filepath: str) -> None:
    """
    Export flat records to a CSV file.
    Header comes from the keys of the first record; every value is written as
    JSON (so strings are quoted) and None becomes an empty string.
    """
    if not records:
        raise ValidationError("No data to export.")
    headers = list(records[0].keys())
    lines = [",".join(headers)]
    for row in records:
        lines.append(",".join(_cell(row, h) for h in headers))
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        f.write("\r\n".join(lines))


def _to_record(obj, drop_id: bool = True) -> Dict[str, Any]:
    out = {camel_case(k): v for k, v in asdict(obj).items()}
    if drop_id:
        out.pop("id", None)
    return out


def guests_to_records(guests: List[Guest]) -> List[Dict[str, Any]]:
    """Guest list rows without ids"""
    return [_to_record(g) for g in guests]


def gifts_to_records(gifts: List[GiftItem]) -> List[Dict[str, Any]]:
    """Gift list rows without ids"""
    return [_to_record(g) for g in gifts]


def transactions_to_records(transactions: List[Transaction]) -> List[Dict[str, Any]]:
    return [_to_record(t, drop_id=False) for t in transactions]
