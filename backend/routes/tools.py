"""Tool Routes - ToolHub

POST /api/tools/{slug}/run     - run a computation (counted against the free quota)
POST /api/tools/{slug}/export  - premium export of a run as csv/pdf/json/svg

Gate order for a run: authentication, tool exists, premium tool, quota.
A run is counted only after the computation succeeds.
"""
from fastapi import APIRouter, HTTPException, Request, Query, status
from fastapi.responses import Response
from models import AuditAction, ExportFormat, ToolRunRequest
from middleware import require_user, enforce_premium, require_premium, log_premium_denied
from services.usage_service import usage_service, UsageLimitExceededError
from services.export_service import build_export, ExportNotSupportedError
from tools import execute_tool, get_tool, is_premium_tool, PremiumRequiredError, ToolNotFoundError
from tools.catalog import tool_name
from utils.audit import create_audit_log
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/tools", tags=["tools"])


def _definition_or_404(slug: str):
    try:
        return get_tool(slug)
    except ToolNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


async def _compute(request: Request, user: dict, slug: str, inputs: dict) -> dict:
    try:
        return await execute_tool(slug, inputs, premium=user["is_premium"])
    except PremiumRequiredError as e:
        await log_premium_denied(user, str(request.url.path), e.feature)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


async def _usage_limit_reached(user: dict, slug: str) -> HTTPException:
    limit_error = UsageLimitExceededError(usage_service.monthly_limit)
    logger.warning(f"Usage limit reached: user={user['user_id']} tool={slug}")
    await create_audit_log(
        action=AuditAction.USAGE_LIMIT_REACHED,
        actor_id=user["user_id"],
        metadata={"tool": slug, "limit": usage_service.monthly_limit},
    )
    return HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(limit_error))


@router.post("/{slug}/run")
async def run_tool(slug: str, request: Request, data: ToolRunRequest):
    user = await require_user(request)
    _definition_or_404(slug)

    if is_premium_tool(slug):
        await enforce_premium(request, user, tool_name(slug))

    if not await usage_service.can_use_tool(user["user_id"], user["is_premium"]):
        raise await _usage_limit_reached(user, slug)

    result = await _compute(request, user, slug, data.inputs)
    # Concurrent runs may have used the last slot since the check above
    if not await usage_service.track_tool_usage(user["user_id"], slug, user["is_premium"]):
        raise await _usage_limit_reached(user, slug)

    return {
        "tool": slug,
        "result": result,
        "usage": await usage_service.get_summary(user["user_id"], user["is_premium"]),
    }


@router.post("/{slug}/export")
@require_premium("export")
async def export_tool(
    request: Request,
    slug: str,
    data: ToolRunRequest,
    format: ExportFormat = Query(ExportFormat.CSV),
):
    user = request.state.user
    definition = _definition_or_404(slug)

    result = await _compute(request, user, slug, data.inputs)
    try:
        content, media_type, filename = build_export(definition, result, format.value)
    except ExportNotSupportedError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
