from fastapi import APIRouter

from app.utils.settings import ENABLED_SERVICES, SERVICE_NAME

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok", "service": SERVICE_NAME, "stores": ENABLED_SERVICES}
