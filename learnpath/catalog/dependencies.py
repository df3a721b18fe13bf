"""FastAPI dependencies for the course catalog."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import CatalogService


async def get_catalog_service(request: Request) -> CatalogService:
    """Get catalog service from app state.

    Raises:
        HTTPException(503): If the service was not initialized
    """
    service = getattr(request.app.state, "catalog_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Catalog service not available",
        )
    return service


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
