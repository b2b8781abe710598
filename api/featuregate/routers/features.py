import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, Response
from featuregate.dependencies import get_gate
from featuregate.gate import FeatureGate
from featuregate.metrics import record_evaluation, record_mutation
from featuregate.models import FeatureState, User
from featuregate.schemas import (
    EvaluationResult,
    FeatureListOut,
    FeatureStateOut,
    GroupActivation,
    PercentageActivation,
    UserActivation,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["features"])

def state_to_out(state: FeatureState) -> dict:
    return {
        "name": state.name,
        "groups": sorted(state.groups),
        "users": sorted(state.users),
        "percentage": state.percentage,
    }

def mutated(gate: FeatureGate, name: str, action: str, request: Request) -> dict:
    actor = request.headers.get("X-Actor", "anonymous")
    record_mutation(action)
    logger.info("%s: %s on feature %s", actor, action, name)
    return state_to_out(gate.feature_state(name))

@router.get("/features", response_model=FeatureListOut)
def list_features(gate: FeatureGate = Depends(get_gate)):
    registered = gate.registered_features()
    return {
        "registered": sorted(registered) if registered is not None else None,
        "active": sorted(gate.active_features()),
    }

@router.get("/features/{name}", response_model=FeatureStateOut)
def get_feature(name: str, gate: FeatureGate = Depends(get_gate)):
    return state_to_out(gate.feature_state(name))

@router.post("/features/{name}/groups", response_model=FeatureStateOut)
def activate_group(name: str, payload: GroupActivation, request: Request, gate: FeatureGate = Depends(get_gate)):
    gate.activate_group(name, payload.group)
    return mutated(gate, name, "activate_group", request)

@router.delete("/features/{name}/groups/{group:path}", response_model=FeatureStateOut)
def deactivate_group(name: str, group: str, request: Request, gate: FeatureGate = Depends(get_gate)):
    gate.deactivate_group(name, group)
    return mutated(gate, name, "deactivate_group", request)

@router.post("/features/{name}/users", response_model=FeatureStateOut)
def activate_user(name: str, payload: UserActivation, request: Request, gate: FeatureGate = Depends(get_gate)):
    gate.activate_user(name, User(payload.user_id))
    return mutated(gate, name, "activate_user", request)

@router.delete("/features/{name}/users/{user_id}", response_model=FeatureStateOut)
def deactivate_user(name: str, user_id: int, request: Request, gate: FeatureGate = Depends(get_gate)):
    gate.deactivate_user(name, User(user_id))
    return mutated(gate, name, "deactivate_user", request)

@router.put("/features/{name}/percentage", response_model=FeatureStateOut)
def activate_percentage(name: str, payload: PercentageActivation, request: Request, gate: FeatureGate = Depends(get_gate)):
    gate.activate_percentage(name, payload.percentage)
    return mutated(gate, name, "activate_percentage", request)

@router.delete("/features/{name}/percentage", response_model=FeatureStateOut)
def deactivate_percentage(name: str, request: Request, gate: FeatureGate = Depends(get_gate)):
    gate.deactivate_percentage(name)
    return mutated(gate, name, "deactivate_percentage", request)

@router.delete("/features/{name}", status_code=204)
def deactivate_all(name: str, request: Request, gate: FeatureGate = Depends(get_gate)):
    gate.deactivate_all(name)
    mutated(gate, name, "deactivate_all", request)
    return Response(status_code=204)

@router.get("/evaluate/{name}", response_model=EvaluationResult)
def evaluate(name: str, user_id: Optional[int] = Query(None, ge=0), gate: FeatureGate = Depends(get_gate)):
    # no user_id -> anonymous (not logged in)
    user = User(user_id) if user_id is not None else None
    active, reason = gate.explain(name, user)
    record_evaluation(name, active, known=gate.is_known(name))
    return {"key": name, "active": active, "reason": reason}
