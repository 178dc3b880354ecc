# app/services/inventory_client.py
from app.domain.schemas import ProductOut
from app.services.service_client import ServiceClient
from app.utils.settings import INVENTORY_SERVICE_URL


class InventoryClient(ServiceClient):
    service_name = "inventory-service"

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        super().__init__(base_url or INVENTORY_SERVICE_URL, timeout)

    def get_product_by_id(self, product_id: int) -> ProductOut:
        resp = self._request("GET", f"/invent/biller-customer/products/{product_id}")
        return ProductOut.model_validate(resp.json())

    def get_product_by_name(self, name: str) -> ProductOut:
        resp = self._request("GET", "/invent/products/by-name", params={"name": name})
        return ProductOut.model_validate(resp.json())

    def reduce_stock(self, product_id: int, quantity: int) -> None:
        self._request("PUT", f"/invent/products/{product_id}/reduce-stock", params={"quantity": quantity})
