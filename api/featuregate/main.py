import logging
import os
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from featuregate.exceptions import InvalidFeature, StoreError
from featuregate.metrics import setup_metrics
from featuregate.routers.features import router as features_router
from featuregate.routers.health import router as health_router

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Feature Gate Service", version="0.1.0")

# CORS (adjust as needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(InvalidFeature)
async def invalid_feature_handler(request: Request, exc: InvalidFeature):
    return JSONResponse(status_code=404, content={"detail": "feature not registered", "feature": exc.feature})

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "feature store unavailable"})

# Routers
app.include_router(health_router, prefix="")
app.include_router(features_router, prefix="")

# Metrics endpoint
setup_metrics(app)
