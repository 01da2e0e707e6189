"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from hotel_analytics.services.analytics_service import AnalyticsWorkflowService


def get_workflow_service(request: Request) -> AnalyticsWorkflowService:
    service = getattr(request.app.state, "workflow_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analytics workflow service is not initialized",
        )
    return service
