# Routers package
from .analytics import router as analytics_router
