"""
Pure helpers mapping between Correios payloads and Python values.
"""
from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence, Union
import re

from correios_hub.integrations.correios.errors import CorreiosPayloadError


DateLike = Union[str, date]


def parse_price(val: Any) -> Decimal:
    """
    Correios sends prices as comma-decimal strings ("10,50", "1.234,56").
    Dots are thousands separators only when a comma is present.
    """
    if val is None:
        raise CorreiosPayloadError("price value missing")
    if isinstance(val, Decimal):
        return val
    if isinstance(val, int):
        return Decimal(val)

    s = str(val).strip()
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    try:
        d = Decimal(s)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise CorreiosPayloadError(f"unparsable price value: {val!r}") from e
    if not d.is_finite():
        raise CorreiosPayloadError(f"unparsable price value: {val!r}")
    return d


def format_posting_date(val: DateLike) -> str:
    if isinstance(val, datetime):
        return val.date().isoformat()
    if isinstance(val, date):
        return val.isoformat()
    return str(val).strip()


def event_date_from_posting(posting_date: DateLike) -> str:
    """YYYY-MM-DD -> DD-MM-YYYY (dtEvento format)."""
    if isinstance(posting_date, datetime):
        d = posting_date.date()
    elif isinstance(posting_date, date):
        d = posting_date
    else:
        s = str(posting_date).strip()
        m = re.match(r"^(\d{4})-(\d{2})-(\d{2})", s)
        if not m:
            raise ValueError(f"posting date must be YYYY-MM-DD, got {posting_date!r}")
        d = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    return d.strftime("%d-%m-%Y")


def only_digits(cep: Any) -> str:
    return re.sub(r"\D", "", str(cep or ""))


def build_deadline_params(
    products: Sequence[Dict[str, Any]],
    *,
    posting_date: DateLike,
    origin_cep: str,
    destination_cep: str,
    event_date: str,
) -> List[Dict[str, Any]]:
    """One parametrosPrazo entry per accumulated product, insertion order kept."""
    posting = format_posting_date(posting_date)
    origin = only_digits(origin_cep)
    destination = only_digits(destination_cep)
    return [
        {
            "coProduto": p.get("coProduto"),
            "nuRequisicao": p.get("nuRequisicao"),
            "dtEvento": event_date,
            "cepOrigem": origin,
            "cepDestino": destination,
            "dataPostagem": posting,
        }
        for p in products
    ]


def extract_records(payload: Any, context: str) -> List[Dict[str, Any]]:
    """A batch response must be a JSON list of objects."""
    if not isinstance(payload, list) or not all(isinstance(x, dict) for x in payload):
        raise CorreiosPayloadError(f"{context}: expected a list of records, got {type(payload).__name__}")
    return payload


def first_matching(records: Optional[Sequence[Dict[str, Any]]], product_code: str) -> Optional[Dict[str, Any]]:
    for rec in records or ():
        if rec.get("coProduto") == product_code:
            return rec
    return None
