from .auth import auth_router
from .problem import problem_router
from .submission import submission_router
from .users import users_router

__all__ = [
    "auth_router",
    "problem_router",
    "submission_router",
    "users_router",
]
