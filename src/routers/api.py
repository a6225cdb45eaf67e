from fastapi import APIRouter

from routers import accessory, measurement

router = APIRouter()

# include sub-routers
router.include_router(accessory.router)
router.include_router(measurement.router)
