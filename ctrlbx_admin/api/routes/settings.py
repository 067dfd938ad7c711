# =======================================================================================
# ctrlbx_admin/api/routes/settings.py - Backend URL configuration
# =======================================================================================
from fastapi import APIRouter, Depends

from ...models.schemas import BackendUrlRequest, BackendUrlResponse
from ...services.gateway import RemoteDataGateway
from ...utils.exceptions import InputValidationError
from ..dependencies import get_gateway

router = APIRouter()


@router.get("/config/backend-url", response_model=BackendUrlResponse)
def get_backend_url(gateway: RemoteDataGateway = Depends(get_gateway)):
    return BackendUrlResponse(url=gateway.base_url or "")


@router.put("/config/backend-url", response_model=BackendUrlResponse)
def set_backend_url(request: BackendUrlRequest, gateway: RemoteDataGateway = Depends(get_gateway)):
    url = request.url.strip()
    if not url.startswith(("http://", "https://")):
        raise InputValidationError("Backend URL must start with http:// or https://")
    gateway.set_base_url(url)
    return BackendUrlResponse(url=url)
