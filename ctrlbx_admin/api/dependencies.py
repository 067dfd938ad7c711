# =======================================================================================
# ctrlbx_admin/api/dependencies.py - FastAPI Dependencies
# =======================================================================================
from datetime import date
from typing import Callable, Dict, List, Optional, Type, TypeVar

from fastapi import Depends, Request

from ..services.base import ViewService
from ..services.filter_state import DateRange
from ..services.gateway import RemoteDataGateway
from ..services.session_service import SessionContext
from ..services.view_lifecycle import CancellationToken, ViewNavigator
from ..utils.exceptions import AuthenticationError

S = TypeVar("S", bound=ViewService)


def get_gateway(request: Request) -> RemoteDataGateway:
    return request.app.state.gateway


def get_session(request: Request) -> SessionContext:
    return request.app.state.session


def get_navigator(request: Request) -> ViewNavigator:
    return request.app.state.navigator


def require_login(session: SessionContext = Depends(get_session)) -> SessionContext:
    """Dependency for every page and action behind the login screen."""
    if not session.is_logged_in():
        raise AuthenticationError("Not logged in")
    return session


def view_service(cls: Type[S]) -> Callable[..., S]:
    """Build a dependency returning a view service bound to the logged-in session."""

    def _dependency(
        session: SessionContext = Depends(require_login),
        gateway: RemoteDataGateway = Depends(get_gateway),
    ) -> S:
        return cls(session, gateway)

    return _dependency


def enter_view(page: str) -> Callable[..., CancellationToken]:
    """Navigate to a page: capability check, then a fresh cancellation token."""

    def _dependency(
        session: SessionContext = Depends(require_login),
        navigator: ViewNavigator = Depends(get_navigator),
    ) -> CancellationToken:
        return navigator.navigate(page, session.get_role())

    return _dependency


def date_range(start_date: Optional[date] = None, end_date: Optional[date] = None) -> Optional[DateRange]:
    if start_date is None and end_date is None:
        return None
    return DateRange(start_date, end_date)


def selection(**dimensions: Optional[List[str]]) -> Dict[str, List[str]]:
    """Multi-select query values; absent dimensions keep their view default."""
    return {dim: values for dim, values in dimensions.items() if values is not None}
