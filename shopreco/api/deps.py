# shopreco/api/deps.py
import hmac
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request

from shopreco.core.container import Container


# The service container built by the lifespan
def get_container(request: Request) -> Container:
    return request.app.state.container


# Caller identity; authentication happens upstream of this service
def current_user_id(x_user_id: Annotated[Optional[str], Header()] = None) -> Optional[str]:
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None


def require_admin(
    container: Annotated[Container, Depends(get_container)],
    x_admin_key: Annotated[Optional[str], Header()] = None,
) -> None:
    expected = container.settings.ADMIN_API_KEY
    if not expected or not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=401, detail="Admin access required")


ContainerDep = Annotated[Container, Depends(get_container)]
UserIdDep = Annotated[Optional[str], Depends(current_user_id)]
