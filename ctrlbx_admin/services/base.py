# =======================================================================================
# ctrlbx_admin/services/base.py - Shared plumbing for view services
# =======================================================================================
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from ..models.schemas import GatewayResponse
from ..utils.exceptions import GatewayError
from .gateway import RemoteDataGateway, ensure_success
from .session_service import SessionContext
from .view_lifecycle import CancellationToken, gather

logger = logging.getLogger(__name__)


class ViewService:
    """Base for the per-view services: session, gateway and safe loading."""

    view: str = ""

    def __init__(self, session: SessionContext, gateway: RemoteDataGateway):
        self.session = session
        self.gateway = gateway

    def _token(self, token: Optional[CancellationToken]) -> CancellationToken:
        return token or CancellationToken(self.view)

    async def _load_all(self, token: CancellationToken, *aws: Awaitable[GatewayResponse]) -> List[Any]:
        """
        Fetch in parallel; a fetch that fails at the transport level yields None
        so the view can still render with empty data.
        """
        results = await gather(token, *aws, return_exceptions=True)
        out = []
        for result in results:
            if isinstance(result, GatewayError):
                logger.error("Error loading %s data: %s", self.view, result)
                out.append(None)
            elif isinstance(result, BaseException):
                raise result
            else:
                out.append(result)
        return out

    async def _mutate(self, action: str, call: Callable[[], Awaitable[GatewayResponse]]) -> GatewayResponse:
        """Capability check first, then exactly one POST, then success check."""
        self.session.require(action)
        response = await call()
        return ensure_success(response, action)


def items(response: Optional[GatewayResponse], field: str) -> list:
    """List payload of a read, or [] when it failed or came back empty."""
    if response is None or not response.success:
        return []
    return list(getattr(response, field, None) or [])


def sorted_by(records: Sequence[Any], field: str) -> list:
    return sorted(records, key=lambda r: getattr(r, field, "") or "")
