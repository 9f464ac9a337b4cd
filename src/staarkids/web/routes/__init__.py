"""Route handlers for the Web API."""

from staarkids.web.routes.health import router as health_router
from staarkids.web.routes.questions import router as questions_router
from staarkids.web.routes.practice import router as practice_router
from staarkids.web.routes.exams import router as exams_router
from staarkids.web.routes.users import router as users_router
from staarkids.web.routes.classrooms import router as classrooms_router
from staarkids.web.routes.chat import router as chat_router
from staarkids.web.routes.parents import router as parents_router

__all__ = [
    "health_router",
    "questions_router",
    "practice_router",
    "exams_router",
    "users_router",
    "classrooms_router",
    "chat_router",
    "parents_router",
]
