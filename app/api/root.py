from fastapi import APIRouter

router = APIRouter()

@router.get("/")
def root():
    return {
        "name": "Team Check-in Backend",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }
