"""Teaching plan endpoints.

Served under /api/plans and, for older clients, /api/teaching-plans.
"""

from datetime import date

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from preprimary.core.access import scoped_teacher_id
from preprimary.core.domain import ClassLevel, PlanType
from preprimary.db.plans_repository import create_plan, delete_plan, list_plans, update_plan
from preprimary.db.users_repository import UserRecord
from preprimary.utils.validators import check_date_range
from preprimary.web.deps import get_current_user, load_plan, not_found
from preprimary.web.schemas import PlanCreate, PlanListResponse, PlanResponse, PlanUpdate

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/plans", tags=["plans"])
alias_router = APIRouter(prefix="/api/teaching-plans", tags=["plans"], include_in_schema=False)


def _bad_request(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


async def list_all_plans(
    plan_type: PlanType | None = Query(default=None, alias="type"),
    class_level: ClassLevel | None = Query(default=None, alias="class"),
    teacher_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    user: UserRecord = Depends(get_current_user),
) -> PlanListResponse:
    """List plans overlapping an optional date window. Teachers see their own."""
    try:
        check_date_range(start_date, end_date)
    except ValueError as e:
        raise _bad_request(e) from e

    plans = list_plans(
        plan_type=plan_type.value if plan_type else None,
        class_level=class_level.value if class_level else None,
        teacher_id=scoped_teacher_id(user, teacher_id),
        start_date=start_date,
        end_date=end_date,
    )
    return PlanListResponse(
        plans=[PlanResponse.model_validate(p) for p in plans],
        count=len(plans),
    )


async def create_new_plan(
    plan_data: PlanCreate,
    user: UserRecord = Depends(get_current_user),
) -> PlanResponse:
    """Create a plan authored by the current user."""
    plan = create_plan(
        plan_type=plan_data.type.value,
        class_level=plan_data.class_level.value,
        title=plan_data.title,
        description=plan_data.description,
        activities=plan_data.activities,
        goals=plan_data.goals,
        start_date=plan_data.start_date,
        end_date=plan_data.end_date,
        created_by=user.id,
    )

    logger.info("plans.created", plan_id=plan.id, created_by=user.id)
    return PlanResponse.model_validate(plan)


async def get_one_plan(
    plan_id: int, user: UserRecord = Depends(get_current_user)
) -> PlanResponse:
    """Get a specific plan by ID."""
    return PlanResponse.model_validate(load_plan(plan_id, user))


async def update_one_plan(
    plan_id: int,
    plan_data: PlanUpdate,
    user: UserRecord = Depends(get_current_user),
) -> PlanResponse:
    """Update a plan. The resulting period must still be in order."""
    plan = load_plan(plan_id, user)
    changes = plan_data.changes()

    try:
        check_date_range(
            date.fromisoformat(changes.get("start_date", plan.start_date)),
            date.fromisoformat(changes.get("end_date", plan.end_date)),
        )
    except ValueError as e:
        raise _bad_request(e) from e

    updated = update_plan(plan_id, changes)
    if updated is None:
        raise not_found(f"Teaching plan {plan_id}")

    logger.info("plans.updated", plan_id=plan_id, fields=sorted(changes))
    return PlanResponse.model_validate(updated)


async def delete_one_plan(
    plan_id: int, user: UserRecord = Depends(get_current_user)
) -> None:
    """Delete a plan."""
    load_plan(plan_id, user)
    delete_plan(plan_id)
    logger.info("plans.deleted", plan_id=plan_id)


for _router in (router, alias_router):
    _router.add_api_route("", list_all_plans, methods=["GET"], response_model=PlanListResponse)
    _router.add_api_route(
        "",
        create_new_plan,
        methods=["POST"],
        response_model=PlanResponse,
        status_code=status.HTTP_201_CREATED,
    )
    _router.add_api_route("/{plan_id}", get_one_plan, methods=["GET"], response_model=PlanResponse)
    _router.add_api_route(
        "/{plan_id}", update_one_plan, methods=["PUT"], response_model=PlanResponse
    )
    _router.add_api_route(
        "/{plan_id}",
        delete_one_plan,
        methods=["DELETE"],
        status_code=status.HTTP_204_NO_CONTENT,
    )
