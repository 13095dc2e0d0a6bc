"""Route handlers for Web API."""

from preprimary.web.routes.auth import router as auth_router
from preprimary.web.routes.health import router as health_router
from preprimary.web.routes.plans import alias_router as plans_alias_router
from preprimary.web.routes.plans import router as plans_router
from preprimary.web.routes.progress import router as progress_router
from preprimary.web.routes.reports import router as reports_router
from preprimary.web.routes.stats import router as stats_router
from preprimary.web.routes.students import router as students_router
from preprimary.web.routes.suggestions import router as suggestions_router
from preprimary.web.routes.teachers import router as teachers_router

__all__ = [
    "auth_router",
    "health_router",
    "plans_alias_router",
    "plans_router",
    "progress_router",
    "reports_router",
    "stats_router",
    "students_router",
    "suggestions_router",
    "teachers_router",
]
