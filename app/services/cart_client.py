# app/services/cart_client.py
from app.domain.schemas import CartItemOut, CartIdOut
from app.services.service_client import ServiceClient
from app.utils.settings import CART_SERVICE_URL


class CartClient(ServiceClient):
    service_name = "cart-service"

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        super().__init__(base_url or CART_SERVICE_URL, timeout)

    def get_cart_items_by_user_id(self, user_id: int) -> list[CartItemOut]:
        resp = self._request("GET", f"/cart/users/{user_id}/items")
        body = resp.json()
        if body is None:
            return []
        return [CartItemOut.model_validate(item) for item in body]

    def get_cart_id_by_user_id(self, user_id: int) -> int:
        resp = self._request("GET", f"/cart/users/{user_id}/cart-id")
        return CartIdOut.model_validate(resp.json()).cart_id

    def clear_cart_and_reduce_stock(self, user_id: int) -> None:
        self._request("DELETE", f"/cart/users/{user_id}/clear-and-reduce-stock")
