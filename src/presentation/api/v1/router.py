from fastapi import APIRouter

from .approval import approval_router
from .audit import audit_router
from .health import health_router
from .proposal import proposal_router

router = APIRouter()

router.include_router(health_router, tags=["Health"])
router.include_router(proposal_router, tags=["Proposals"])
router.include_router(approval_router, tags=["Approvals"])
router.include_router(audit_router, tags=["Audit"])
