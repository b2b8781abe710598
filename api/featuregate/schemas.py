from pydantic import BaseModel, Field, conint
from typing import List, Optional

class GroupActivation(BaseModel):
    group: str = Field(..., min_length=1, description="group name, e.g. all, admins")

class UserActivation(BaseModel):
    user_id: conint(ge=0)

class PercentageActivation(BaseModel):
    percentage: conint(ge=0, le=100)

class FeatureStateOut(BaseModel):
    name: str
    groups: List[str]
    users: List[int]
    percentage: Optional[int] = None

class FeatureListOut(BaseModel):
    registered: Optional[List[str]] = None
    active: List[str]

class EvaluationResult(BaseModel):
    key: str
    active: bool
    reason: str
