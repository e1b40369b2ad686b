from pydantic import BaseModel, Field, model_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class VisibilityRules(BaseModel):
    threshold: float = Field(default=0.75, gt=0, le=1)
    dwell_ms: int = Field(default=3000, ge=0)


class GestureRules(BaseModel):
    swipe_threshold: float = Field(default=100, gt=0)


class FeedbackWindowRules(BaseModel):
    accepted_ms: int = Field(default=800, ge=0)
    pending_ms: int = Field(default=800, ge=0)
    pass_ms: int = Field(default=800, ge=0)
    error_ms: int = Field(default=1500, ge=0)
    like_ms: int = Field(default=1000, ge=0)


class MatchingRules(BaseModel):
    feedback: FeedbackWindowRules = Field(default_factory=FeedbackWindowRules)


class AnalyticsRules(BaseModel):
    window_days: int = Field(default=30, ge=1, le=365)
    allowed_windows: list[int] = Field(default_factory=lambda: [7, 30, 90])
    recent_limit: int = Field(default=10, ge=1)

    @model_validator(mode="after")
    def default_window_allowed(self) -> "AnalyticsRules":
        if self.window_days not in self.allowed_windows:
            raise ValueError(
                f"window_days {self.window_days} is not one of {self.allowed_windows}"
            )
        return self


class IndexRule(BaseModel):
    collection: str
    fields: list[str] = Field(min_length=2)


class StoreRules(BaseModel):
    indexes: list[IndexRule] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    visibility: VisibilityRules = Field(default_factory=VisibilityRules)
    gestures: GestureRules = Field(default_factory=GestureRules)
    matching: MatchingRules = Field(default_factory=MatchingRules)
    analytics: AnalyticsRules = Field(default_factory=AnalyticsRules)
    store: StoreRules = Field(default_factory=StoreRules)
