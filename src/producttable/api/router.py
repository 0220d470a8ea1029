# producttable/api/router.py

from fastapi import APIRouter
from producttable.api.v1 import tables
from producttable.api.v1 import render
from producttable.api.v1 import preview
from producttable.api.v1 import catalog
from producttable.api.v1 import system

# The main router for API v1
router = APIRouter(prefix="/api/v1")

# ===================================================================
# Editor Routes
# ===================================================================

router.include_router(
    tables.router,
    prefix="/tables",
    tags=["Editor - Tables"]
)
router.include_router(
    preview.router,
    prefix="/preview",
    tags=["Editor - Preview"]
)
router.include_router(
    catalog.router,
    prefix="/catalog",
    tags=["Editor - Catalog"]
)
router.include_router(
    system.router,
    prefix="/system",
    tags=["Editor - System"]
)

# ===================================================================
# Public Rendering Routes
# ===================================================================

router.include_router(
    render.router,
    prefix="/tables",
    tags=["Public - Rendering"]
)
