"""Catalog Routes - ToolHub
Public browsing of categories and tools. The `locked` flag reflects the
caller when a bearer token is sent; anonymous callers see premium tools locked.
"""
from fastapi import APIRouter, HTTPException, Request, status
from database import database
from middleware import get_current_user
from services.premium_service import is_premium_active
from tools import CATEGORIES, get_category, describe_tool
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/catalog", tags=["catalog"])


async def _caller_is_premium(request: Request) -> bool:
    user = await get_current_user(request)
    if not user:
        return False
    profile = await database.get_db().profiles.find_one({"user_id": user["user_id"]}, {"_id": 0})
    return is_premium_active(profile)


def _category_summary(category: dict) -> dict:
    return {
        "slug": category["slug"],
        "title": category["title"],
        "description": category["description"],
        "premium": category["premium"],
        "tool_count": len(category["tools"]),
    }


@router.get("/categories")
async def list_categories():
    return {"categories": [_category_summary(c) for c in CATEGORIES]}


@router.get("/categories/{slug}")
async def get_category_detail(slug: str, request: Request):
    category = get_category(slug)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Category '{slug}' not found")

    premium = await _caller_is_premium(request)
    tools = []
    for tool_slug in category["tools"]:
        tool = describe_tool(tool_slug)
        tool["locked"] = tool["premium"] and not premium
        tools.append(tool)
    return {**_category_summary(category), "tools": tools}


@router.get("/tools/{slug}")
async def get_tool_detail(slug: str, request: Request):
    tool = describe_tool(slug)
    if not tool:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Tool '{slug}' not found")

    premium = await _caller_is_premium(request)
    tool["locked"] = tool["premium"] and not premium
    return tool
