from fastapi import APIRouter

from household_ledger.domain.catalog import CATEGORIES, USERS
from household_ledger.models import Category, UserProfile

router = APIRouter()


@router.get("/users", response_model=list[UserProfile])
async def get_users() -> list[UserProfile]:
    return list(USERS)


@router.get("/categories", response_model=list[Category])
async def get_categories() -> list[Category]:
    return list(CATEGORIES)
