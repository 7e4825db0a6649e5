"""
API v1 routes.
"""

from fastapi import APIRouter

from academy.api.v1 import training
from academy.schemas.common import ErrorResponse

router = APIRouter()

# Rejected training operations share one error body
_training_errors = {
    code: {"model": ErrorResponse}
    for code in (403, 404, 409, 422)
}

router.include_router(training.router, prefix="/training", tags=["Training"], responses=_training_errors)
