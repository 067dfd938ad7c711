# =======================================================================================
# ctrlbx_admin/api/routes/auth.py - Operator Login Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends

from ...models.schemas import ActionResponse, LoginRequest, SessionResponse
from ...services import capabilities
from ...services.session_service import SessionContext
from ...services.view_lifecycle import ViewNavigator
from ..dependencies import get_navigator, get_session

router = APIRouter()


def _session_response(session: SessionContext) -> SessionResponse:
    role = session.get_role()
    return SessionResponse(
        loggedIn=session.is_logged_in(),
        user=session.get_user(),
        capabilities=capabilities.capabilities_for(role),
        pages=capabilities.visible_pages(role),
    )


@router.post("/auth/login", response_model=SessionResponse)
async def login(request: LoginRequest, session: SessionContext = Depends(get_session)):
    await session.login(request.email.strip())
    return _session_response(session)


@router.post("/auth/logout", response_model=ActionResponse)
def logout(
    session: SessionContext = Depends(get_session),
    navigator: ViewNavigator = Depends(get_navigator),
):
    navigator.leave()
    session.logout()
    return ActionResponse(message="Logged out")


@router.get("/auth/session", response_model=SessionResponse)
def current_session(session: SessionContext = Depends(get_session)):
    return _session_response(session)
