"""Product action dispatcher — calls the product HTTP API and emits UI state events.

Every action dispatches a ``...Request`` event, then either a success event
carrying the relevant part of the response body or a failure event carrying
the server's error message.
"""

from typing import Callable, Optional

import httpx
import structlog

from storefront.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)

Dispatch = Callable[[dict], None]


def error_message(exc: Exception) -> str:
    """Best human-readable message for a failed request."""
    response = getattr(exc, "response", None)
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            if body.get("message"):
                return body["message"]
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return error["message"]
        return f"Request failed with status {response.status_code}"
    return str(exc)


def build_client(base_url: Optional[str] = None) -> httpx.Client:
    return httpx.Client(base_url=base_url or settings.SERVER_URL, timeout=30)


class ProductActions:
    """Product CRUD actions bound to a dispatch callable."""

    def __init__(self, dispatch: Dispatch, client: httpx.Client):
        self.dispatch = dispatch
        self.client = client

    def _run(
        self,
        prefix: str,
        fail_type: str,
        method: str,
        url: str,
        payload_key: str,
        reraise: bool = False,
        **kwargs,
    ) -> Optional[dict]:
        self.dispatch({"type": f"{prefix}Request"})
        try:
            response = self.client.request(method, url, **kwargs)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            message = error_message(e)
            logger.warning("Product action failed", action=prefix, url=url, error=message)
            self.dispatch({"type": f"{prefix}{fail_type}", "payload": message})
            if reraise:
                raise
            return None
        self.dispatch({"type": f"{prefix}Success", "payload": data.get(payload_key)})
        return data

    def create_product(self, product: dict) -> Optional[dict]:
        return self._run("productCreate", "Fail", "POST", "/product/create-product", "product", json=product)

    def get_all_products_shop(self, shop_id: str) -> Optional[dict]:
        return self._run(
            "getAllProductsShop", "Failed", "GET", f"/product/get-all-products-shop/{shop_id}", "products"
        )

    def delete_product(self, product_id: str) -> Optional[dict]:
        """Delete a shop product. Unlike the other actions, failures are re-raised."""
        return self._run(
            "deleteProduct", "Failed", "DELETE", f"/product/delete-shop-product/{product_id}", "message",
            reraise=True,
        )

    def get_all_products(self) -> Optional[dict]:
        return self._run("getAllProducts", "Failed", "GET", "/product/get-all-products", "products")
