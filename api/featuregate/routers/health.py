from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import redis
from featuregate.dependencies import get_gate
from featuregate.gate import FeatureGate

router = APIRouter(tags=["health"])

@router.get("/healthz")
def health(gate: FeatureGate = Depends(get_gate)):
    try:
        gate.redis.ping()
    except redis.exceptions.RedisError:
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ok"}
