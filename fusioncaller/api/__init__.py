"""API module - HTTP routers."""

from fusioncaller.api.webhooks import router as webhook_router
from fusioncaller.api.leads import router as leads_router
from fusioncaller.api.workflows import router as workflows_router

__all__ = [
    "webhook_router",
    "leads_router",
    "workflows_router",
]
