"""Role probe endpoints for clients checking what the current token may do."""
from fastapi import APIRouter, Depends

from ..auth import SessionClaims
from ..schemas import RoleProbeResponse
from ..security import require_dispatcher, require_engineer

router = APIRouter(tags=["access"])


@router.get("/engineer/test", response_model=RoleProbeResponse)
def engineer_probe(identity: SessionClaims = Depends(require_engineer)):
    return RoleProbeResponse(message="Engineer access granted", user=identity.email, role=identity.role.value)


@router.get("/dispatcher/test", response_model=RoleProbeResponse)
def dispatcher_probe(identity: SessionClaims = Depends(require_dispatcher)):
    return RoleProbeResponse(message="Dispatcher access granted", user=identity.email, role=identity.role.value)
