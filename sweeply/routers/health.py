# sweeply/routers/health.py
from fastapi import APIRouter, Request
from sqlalchemy import text

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health():
    return {"ok": True}


@router.get("/db")
async def health_db(request: Request):
    try:
        async with request.app.state.sessionmaker() as session:
            result = await session.execute(text("select 1"))
            return {"db": result.scalar_one()}
    except Exception as e:
        # surface the error so we know exactly what's wrong
        return {"error": str(e)}
