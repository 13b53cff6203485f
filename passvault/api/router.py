from fastapi import APIRouter, Depends, HTTPException, status
from .auth_router import router as auth_router
from .items_router import router as items_router
from .password_router import router as password_router
from ..auth.session import require_session

router = APIRouter(prefix="/api")

# Login and password generation are open; items_router gates itself
router.include_router(auth_router)
router.include_router(password_router)
router.include_router(items_router)


# Must stay last: any other /api path or method needs a session before it gets a 404
@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
    dependencies=[Depends(require_session)],
)
async def unknown_api_route(path: str):
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
