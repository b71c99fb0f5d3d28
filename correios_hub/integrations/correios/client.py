"""
Correios high-level API:
   - accumulate products, then query prices/deadlines in batches of 5 (one request per batch);
   - keep the last price/deadline result sets on the instance for totals and lookups;
   - pre-postage create / cancel / batch upload and label generation (single round trips).
"""
from __future__ import annotations
import io, json, logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from correios_hub.core.config import settings
from correios_hub.integrations.correios.chunking import fetch_in_chunks
from correios_hub.integrations.correios.errors import (
    CorreiosNotFoundError, CorreiosPayloadError, CorreiosPreconditionError,
)
from correios_hub.integrations.correios.http_client import CorreiosHttpClient
from correios_hub.integrations.correios.normalizers import (
    DateLike, build_deadline_params, event_date_from_posting, extract_records, first_matching, parse_price,
)
from correios_hub.utils.serialization import to_jsonable

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 5  # upstream per-request item limit


class CorreiosClient:
    """One instance owns one token and its own product list / result sets; not thread-safe."""

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        postage_card: Optional[str] = None,
        production: Optional[bool] = None,
        *,
        http: Optional[CorreiosHttpClient] = None,
        batch_size: Optional[int] = None,
        batch_id: Optional[str] = None,
        **http_kwargs: Any,
    ) -> None:
        """Inject a CorreiosHttpClient for tests; otherwise one is built from the arguments/settings."""
        self.http = http or CorreiosHttpClient(username, password, postage_card, production, **http_kwargs)
        if batch_size is None:
            batch_size = settings.CORREIOS_BATCH_SIZE
        elif not 1 <= batch_size <= MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}, got {batch_size}")
        self.batch_size = batch_size
        self.batch_id = batch_id or settings.CORREIOS_BATCH_ID

        self._products: List[Dict[str, Any]] = []
        self._price_results: Optional[List[Dict[str, Any]]] = None
        self._deadline_results: Optional[List[Dict[str, Any]]] = None


    # -------- products --------
    def add_product(self, product_code: str, attributes: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Append a product entry (attributes + coProduto); queries never clear the list."""
        entry = dict(attributes or {})
        entry["coProduto"] = product_code
        self._products.append(entry)
        return entry

    @property
    def products(self) -> List[Dict[str, Any]]:
        return [dict(p) for p in self._products]

    @property
    def price_results(self) -> Optional[List[Dict[str, Any]]]:
        return self._price_results

    @property
    def deadline_results(self) -> Optional[List[Dict[str, Any]]]:
        return self._deadline_results


    # -------- prices --------
    def query_prices(self) -> List[Dict[str, Any]]:
        """Price every accumulated product; the merged result replaces the previous one."""
        if not self._products:
            raise CorreiosPreconditionError("no products added for price query")
        self.http.ensure_valid()

        def _one(chunk: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            body = {"idLote": self.batch_id, "parametrosProduto": to_jsonable(chunk)}
            payload = self.http.post_json(settings.CORREIOS_PRICE_ENDPOINT, body)
            return extract_records(payload, "price query")

        results = fetch_in_chunks(self._products, _one, self.batch_size)
        self._price_results = results
        logger.info(
            "Correios price query done: products=%d chunks=%d records=%d",
            len(self._products), _chunk_count(len(self._products), self.batch_size), len(results),
        )
        return results

    def price_total(self, product_code: str) -> Decimal:
        """Sum pcFinal over the records of product_code; Decimal(0) when none match."""
        if self._price_results is None:
            raise CorreiosPreconditionError("prices not queried yet")

        total = Decimal("0")
        for rec in self._price_results:
            if rec.get("coProduto") == product_code:
                total += parse_price(rec.get("pcFinal"))
        return total


    # -------- deadlines --------
    def query_deadlines(
        self,
        posting_date: DateLike,
        origin_cep: str,
        destination_cep: str,
        event_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Delivery estimate for every accumulated product.
        posting_date is YYYY-MM-DD; event_date (DD-MM-YYYY) defaults to the posting date.
        """
        if not self._products:
            raise CorreiosPreconditionError("no products added for deadline query")
        if not event_date:
            try:
                event_date = event_date_from_posting(posting_date)
            except ValueError as e:
                raise CorreiosPreconditionError(f"invalid posting date: {posting_date!r}") from e
        self.http.ensure_valid()

        params = build_deadline_params(
            self._products,
            posting_date=posting_date,
            origin_cep=origin_cep,
            destination_cep=destination_cep,
            event_date=event_date,
        )

        def _one(chunk: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            body = {"idLote": self.batch_id, "parametrosPrazo": to_jsonable(chunk)}
            payload = self.http.post_json(settings.CORREIOS_DEADLINE_ENDPOINT, body)
            return extract_records(payload, "deadline query")

        results = fetch_in_chunks(params, _one, self.batch_size)
        self._deadline_results = results
        logger.info(
            "Correios deadline query done: products=%d chunks=%d records=%d",
            len(params), _chunk_count(len(params), self.batch_size), len(results),
        )
        return results

    def find_deadline(self, product_code: str) -> Optional[Dict[str, Any]]:
        """First deadline record for product_code, or None."""
        if self._deadline_results is None:
            raise CorreiosPreconditionError("deadlines not queried yet")
        return first_matching(self._deadline_results, product_code)

    def deadline_for(self, product_code: str) -> Dict[str, Any]:
        rec = self.find_deadline(product_code)
        if rec is None:
            raise CorreiosNotFoundError(f"product {product_code} not found in deadline results")
        return rec


    # -------- pre-postage --------
    def create_prepostagem(self, payload: Dict[str, Any]) -> Any:
        return self.http.post_json(settings.CORREIOS_PREPOSTAGEM_ENDPOINT, to_jsonable(payload))

    def cancel_prepostagem(self, prepostagem_id: str, requester_id: Optional[str] = None) -> Any:
        requester_id = requester_id or settings.CORREIOS_REQUESTER_ID
        params = {"idCorreiosSolicitanteCancelamento": requester_id} if requester_id else None
        path = f"{settings.CORREIOS_PREPOSTAGEM_ENDPOINT}/{prepostagem_id}"
        return self.http.delete_json(path, params=params)

    def create_prepostagens_batch(self, payloads: Sequence[Dict[str, Any]]) -> Any:
        """Upload the pre-postages as a JSON array file part; the body is built in memory."""
        content = json.dumps(to_jsonable(list(payloads)), ensure_ascii=False).encode("utf-8")
        files = {
            settings.CORREIOS_BATCH_FILE_FIELD: ("prepostagens.json", io.BytesIO(content), "application/json"),
        }
        logger.info("Correios pre-postage batch upload: items=%d bytes=%d", len(payloads), len(content))
        return self.http.post_file(settings.CORREIOS_PREPOSTAGEM_BATCH_ENDPOINT, files)

    def generate_label(self, id_correios: str) -> str:
        """Request a label and return urlEtiqueta ("" when the field is absent)."""
        payload = self.http.post_json(settings.CORREIOS_LABEL_ENDPOINT, {"idCorreios": id_correios})
        if not isinstance(payload, dict):
            raise CorreiosPayloadError(f"label response: expected an object, got {type(payload).__name__}")
        return payload.get("urlEtiqueta") or ""


    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "CorreiosClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _chunk_count(n: int, size: int) -> int:
    return -(-n // size)
