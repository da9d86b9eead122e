from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal, Optional


class AssessmentProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    gender: Literal["male", "female", "other"]
    area: Literal["urban", "rural"]
    qualification: str = Field(min_length=1)   # e.g., high-school/graduate/post-graduate
    income: str = Field(min_length=1)          # e.g., below-2L ... above-15L
    vintage: int = Field(ge=0)
    claim_amount: int = Field(ge=0, alias="claimAmount")
    policies_count: int = Field(ge=0, alias="policiesCount")
    policies_chosen: str = Field(min_length=1, alias="policiesChosen")  # "health,life"
    policy_type: str = Field(min_length=1, alias="policyType")
    marital_status: Literal["single", "married", "divorced", "widowed"] = Field(alias="maritalStatus")

    @field_validator("policies_chosen", mode="before")
    @classmethod
    def _join_categories(cls, v: Any) -> Any:
        # accept ["health", "life"] as well as "health,life"
        if isinstance(v, (list, tuple)):
            return ",".join(str(c).strip() for c in v if str(c).strip())
        return v

    @field_validator("policies_chosen")
    @classmethod
    def _require_category(cls, v: str) -> str:
        if not any(c.strip() for c in v.split(",")):
            raise ValueError("at least one policy category must be chosen")
        return v


class ProminenceResult(BaseModel):
    is_prominent: bool
    prominence_score: int = Field(ge=0, le=100)


class Policy(BaseModel):
    id: int
    name: str
    description: str
    category: str
    provider: str
    premium: Optional[int] = None
    coverage: Optional[int] = None
    eligibility_criteria: Dict[str, Any] = Field(default_factory=dict)
    benefits: Dict[str, Any] = Field(default_factory=dict)
    is_government_policy: bool = False


class CategoryBreakdown(BaseModel):
    category: str
    score: float
    government_recommended: bool


class RecommendResponse(BaseModel):
    prominence: ProminenceResult
    government_policies: List[Policy]
    private_policies: List[Policy]
    categories: List[CategoryBreakdown]


class ExplainResponse(BaseModel):
    prominence: ProminenceResult
    reasons: Dict[str, str]
    suggestions: List[str]
    explanation: str


class AssessmentResponse(BaseModel):
    prominence: ProminenceResult
    government_policies: List[Policy]
    private_policies: List[Policy]
    categories: List[CategoryBreakdown]
    reasons: Dict[str, str]
    suggestions: List[str]
    explanation: str
