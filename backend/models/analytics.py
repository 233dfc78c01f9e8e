from pydantic import Field, field_serializer
from typing import Dict, Optional
from datetime import date, datetime

from .base import CamelModel

# 优先级为空的任务在 JSON 中的分组键
NULL_PRIORITY_KEY = "null"


def _priority_keys_to_json(distribution: Optional[Dict[Optional[str], int]]) -> Optional[Dict[str, int]]:
    if distribution is None:
        return None
    return {NULL_PRIORITY_KEY if k is None else k: v for k, v in distribution.items()}


class FeatureSummary(CamelModel):
    """一组任务的聚合特征；todo_count 为 0 时其余字段均缺省"""
    todo_count: int = 0
    completed_count: Optional[int] = None
    completion_rate: Optional[float] = None
    todos_by_day_of_week: Optional[Dict[str, int]] = None
    active_day_count: Optional[int] = None
    most_active_day: Optional[str] = None
    most_active_day_count: Optional[int] = None
    with_due_date: Optional[int] = None
    without_due_date: Optional[int] = None
    priority_distribution: Optional[Dict[Optional[str], int]] = None
    ai_generated_count: Optional[int] = None
    ai_generated_percentage: Optional[float] = None

    @field_serializer("priority_distribution")
    def _serialize_priority_distribution(self, value):
        return _priority_keys_to_json(value)


class PeriodAnalytics(FeatureSummary):
    start_date: datetime
    end_date: datetime


class GrowthMetrics(CamelModel):
    daily_new_users: int
    weekly_new_users: int
    monthly_new_users: int
    total_users: int


class CompletionRateEntry(CamelModel):
    user_id: str
    completed_count: int
    total_count: int
    completion_rate: float
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class EngagementMetrics(CamelModel):
    """用户不存在时所有字段为空"""
    last_login: Optional[datetime] = None
    days_since_registration: Optional[int] = None
    onboarding_complete: Optional[bool] = None
    profile_completeness: Optional[float] = None
    total_todos: Optional[int] = None
    has_memory: Optional[bool] = None
    memory_last_updated: Optional[datetime] = None
    has_task_preferences: Optional[bool] = None
    has_work_patterns: Optional[bool] = None
    has_interaction_history: Optional[bool] = None
    has_user_persona: Optional[bool] = None
    has_memory_text: Optional[bool] = None


class WeeklyReport(CamelModel):
    user_id: str
    week_start: date
    week_end: date
    total_todos_created: int
    completed_todos: int
    completion_rate: float
    priority_breakdown: Dict[Optional[str], int] = Field(default_factory=dict)
    ai_generated_count: int
    ai_generated_percentage: float
    with_due_date: int
    without_due_date: int
    # 以下字段仅在用户有历史任务时出现
    completion_rate_change_from_average: Optional[float] = None
    prev_week_todo_count: Optional[int] = None
    prev_week_completion_rate: Optional[float] = None
    todo_count_change_from_prev_week: Optional[int] = None
    completion_rate_change_from_prev_week: Optional[float] = None

    @field_serializer("priority_breakdown")
    def _serialize_priority_breakdown(self, value):
        return _priority_keys_to_json(value)


class SimilarityResult(CamelModel):
    user_id: str
    user_name: Optional[str] = None
    similarity_score: float
    shared_patterns: Dict[str, str] = Field(default_factory=dict)


class ComprehensiveAnalytics(CamelModel):
    task_analytics: FeatureSummary
    engagement_metrics: EngagementMetrics
    weekly_report: WeeklyReport
