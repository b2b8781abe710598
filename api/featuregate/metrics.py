import time
from fastapi import FastAPI, Request
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

REQUESTS = Counter("api_requests_total", "Total API requests", ["method", "route", "http_status"])
LATENCY = Histogram("api_request_latency_seconds", "Request latency", ["method", "route"])
EVALS = Counter("feature_evaluations_total", "Total feature evaluations", ["feature", "result"])
MUTATIONS = Counter("feature_mutations_total", "Total feature state changes", ["action"])

def route_label(request: Request) -> str:
    # templated path, e.g. /features/{name}
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)

OTHER = "other"

def record_evaluation(feature: str, active: bool, known: bool = True):
    # unknown names share one series
    EVALS.labels(feature if known else OTHER, str(active).lower()).inc()

def record_mutation(action: str):
    MUTATIONS.labels(action).inc()

def setup_metrics(app: FastAPI):

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        route = route_label(request)
        LATENCY.labels(request.method, route).observe(elapsed)
        REQUESTS.labels(request.method, route, response.status_code).inc()
        return response

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
