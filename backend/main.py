import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, FastAPI, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from backend import config
from backend.auth import (
    Caller,
    authenticate,
    create_access_token,
    get_caller,
    get_db,
    get_elevated_caller,
)
from backend.crud import (
    change_password,
    create_category,
    delete_category,
    get_profile,
    list_categories,
    update_category,
    update_profile,
)
from backend.messages import translate
from backend.schemas import LoginRequest
from backend.storage import init_db
from backend.validation import validate_or_raise
from exceptions.exceptions import add_exception_handlers, envelope

# Set up logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.testing = app.state.testing if hasattr(app.state, "testing") else False

    if not app.state.testing:
        logger.info("Initializing database schema")
        init_db()
    yield
    logger.info("Library API shutting down")


app = FastAPI(
    title="Library API",
    lifespan=lifespan,
    description="Category management and reader profile endpoints",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

router = APIRouter(prefix=config.API_PREFIX)


def set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(
        key=config.SESSION_COOKIE_NAME,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
    )


# Endpoints
@router.get("/health", status_code=status.HTTP_200_OK)
def health():
    return {"status": "ok"}


@router.post("/auth/login")
def login(credentials: LoginRequest, response: Response, db: Session = Depends(get_db)):
    profile = authenticate(db, credentials.email, credentials.password)
    token = create_access_token(profile)
    set_session_cookie(response, token)
    logger.info(f"Profile {profile.id} logged in")
    return envelope(
        True,
        translate("auth.logged_in"),
        data={"token": token, "role": profile.role.value, "name": profile.name},
    )


@router.post("/auth/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return envelope(True, translate("auth.logged_out"))


@router.get("/categories")
def get_all_categories(
    search: Optional[str] = Query(None),
    sort_by: str = Query("name", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    categories = list_categories(db, search=search, sort_by=sort_by, sort_order=sort_order)
    return envelope(True, data={"categories": categories})


@router.post("/categories", status_code=status.HTTP_201_CREATED)
def add_category(
    payload: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_elevated_caller),
    db: Session = Depends(get_db),
):
    data = validate_or_raise("category", payload)
    category = create_category(db, caller, data)
    return envelope(True, translate("category.created"), data={"category": category})


@router.patch("/categories/{category_id}")
def modify_category(
    category_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_elevated_caller),
    db: Session = Depends(get_db),
):
    data = validate_or_raise("category", payload)
    category = update_category(db, caller, category_id, data)
    return envelope(True, translate("category.updated"), data={"category": category})


@router.delete("/categories/{category_id}")
def remove_category(
    category_id: int,
    caller: Caller = Depends(get_elevated_caller),
    db: Session = Depends(get_db),
):
    delete_category(db, caller, category_id)
    return envelope(True, translate("category.deleted"))


@router.get("/profile")
def read_profile(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    return envelope(True, data={"profile": get_profile(db, caller)})


@router.put("/profile")
def edit_profile(
    payload: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    data = validate_or_raise("profile", payload)
    profile = update_profile(db, caller, data)
    return envelope(True, translate("profile.updated"), data={"profile": profile})


@router.put("/profile/password")
def edit_password(
    response: Response,
    payload: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    data = validate_or_raise("password", payload)
    change_password(db, caller, data)
    # force re-authentication
    clear_session_cookie(response)
    return envelope(True, translate("password.changed"))


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting library API on port {config.BACKEND_PORT}")
    uvicorn.run(app, host=config.BACKEND_HOST, port=config.BACKEND_PORT)
