"""Scrape endpoint for Prometheus."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from mathapi.dependencies import get_metrics

from .collector import MetricsCollector

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
async def metrics_endpoint(
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
) -> Response:
    return Response(content=metrics.render(), media_type=metrics.content_type)
