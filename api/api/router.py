from fastapi import APIRouter
from api.api.routes import users, courses, materials, enrollments, quizzes, admin

api_router = APIRouter()

# Include all route modules
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(courses.router, prefix="/courses", tags=["courses"])
api_router.include_router(materials.router, tags=["materials"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["enrollments"])
api_router.include_router(quizzes.router, prefix="/quizzes", tags=["quizzes"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
