# app/services/order_client.py
from app.domain.schemas import OrderOut
from app.services.service_client import ServiceClient
from app.utils.settings import ORDER_SERVICE_URL


class OrderClient(ServiceClient):
    service_name = "order-service"

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        super().__init__(base_url or ORDER_SERVICE_URL, timeout)

    def get_order_by_order_id(self, order_id: int) -> OrderOut | None:
        resp = self._request("GET", f"/bill/admin-biller/orders/{order_id}")
        body = resp.json()
        if body is None:
            return None
        return OrderOut.model_validate(body)
