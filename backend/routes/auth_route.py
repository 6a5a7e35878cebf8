import tomllib
from fastapi import APIRouter, Depends, Request

from models.auth import User
from routes.deps import get_current_user
from services.directory import user_summary
from settings import PROJECT_PATH

router = APIRouter()


def get_version() -> str:
    """Read version from pyproject.toml"""

    with open(PROJECT_PATH / "pyproject.toml", "rb") as f:
        pyproject = tomllib.load(f)
    return pyproject["project"]["version"]


@router.get("/")
async def index():
    return {"version": get_version(), "status": "ok"}


@router.get("/user/me")
async def get_current_user_info(
    user: User | None = Depends(get_current_user),
):
    if not user:
        return {"user": None}

    return {
        "user": {
            **user_summary(user).model_dump(by_alias=True),
            "joinDate": user.join_date.isoformat(),
        }
    }


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out successfully"}
