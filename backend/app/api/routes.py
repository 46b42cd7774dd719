from fastapi import APIRouter

from app.api.metrics import router as metrics_router
from app.api.system import router as system_router
from app.api.ws import router as ws_router

router = APIRouter()

router.include_router(system_router)
router.include_router(metrics_router)
router.include_router(ws_router)
