from typing import Any, Dict, Optional

import requests

from .logging import get_logger


class InventoryClient:
    """Thin client for the inventory JSON API with session, timeouts and logging.

    Deletes go through the API's confirmation step; with `confirm=True` the
    returned prompt is confirmed right away.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base = base_url.rstrip("/")
        self.timeout = int(timeout)
        self.log = get_logger("inventory-client")
        self.s = session or requests.Session()
        self.s.headers.update({"Accept": "application/json"})

    # ---------- helpers ----------
    def _url(self, path: str) -> str:
        return f"{self.base}{path}"

    def _json(self, r: requests.Response, *, allow_status: tuple = ()) -> Any:
        if r.status_code not in allow_status:
            r.raise_for_status()
        try:
            return r.json()
        except ValueError:
            return None

    def _request(self, method: str, path: str, *, allow_status: tuple = (), **kwargs: Any) -> Any:
        url = self._url(path)
        try:
            r = self.s.request(method, url, timeout=self.timeout, **kwargs)
            return self._json(r, allow_status=allow_status)
        except requests.RequestException as e:
            self.log.error(f"{method} {path} failed: {e}")
            raise

    # ---------- status ----------
    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/api/health")

    def preview_price(self, cost_price: Any, markup: Any = "") -> str:
        body = self._request("POST", "/api/pricing/preview", json={"cost_price": cost_price, "markup": markup})
        return str(body["selling_price"])

    # ---------- products ----------
    def list_products(
        self,
        *,
        category: Optional[str] = None,
        brand: Optional[str] = None,
        supplier: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {k: v for k, v in (("category", category), ("brand", brand), ("supplier", supplier)) if v}
        return self._request("GET", "/api/products", params=params)

    def create_product(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a product; a 422 returns the field errors instead of raising."""
        self.log.info(f"POST product: name={payload.get('name')!r}")
        return self._request("POST", "/api/products", json=payload, allow_status=(422,))

    def update_product(self, product_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/api/products/{product_id}", json=payload, allow_status=(422,))

    def duplicate_product(self, product_id: str) -> Dict[str, Any]:
        body = self._request("POST", f"/api/products/{product_id}/duplicate")
        return body["draft"]

    def delete_product(self, product_id: str, *, confirm: bool = True) -> Dict[str, Any]:
        body = self._request("DELETE", f"/api/products/{product_id}")
        return self._maybe_confirm(body, confirm)

    # ---------- taxonomies ----------
    def list_taxonomy(self, kind: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/taxonomies/{kind}")

    def add_taxonomy(self, kind: str, name: str) -> Dict[str, Any]:
        return self._request("POST", f"/api/taxonomies/{kind}", json={"name": name})

    def delete_taxonomy(self, kind: str, entry_id: str, *, confirm: bool = True) -> Dict[str, Any]:
        """Request deletion; a 409 (entry in use) returns the refusal payload."""
        body = self._request("DELETE", f"/api/taxonomies/{kind}/{entry_id}", allow_status=(409,))
        if "confirmation" not in (body or {}):
            self.log.warning(f"Delete {kind} {entry_id} refused: {(body or {}).get('detail')}")
            return body
        return self._maybe_confirm(body, confirm)

    def _maybe_confirm(self, body: Dict[str, Any], confirm: bool) -> Dict[str, Any]:
        if not confirm:
            return body
        prompt_id = body["confirmation"]["id"]
        return self._request("POST", f"/api/confirmations/{prompt_id}")
