"""Health endpoint.

Exposes:
- GET /health: lightweight liveness probe
"""

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
def health():
    """Container/load-balancer friendly liveness probe."""
    return {"status": "healthy"}
