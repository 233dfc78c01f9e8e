"""增长、参与度、周报等统计报表

所有函数都只读取 store，不保存任何状态。now 默认取当前本地时间，
因此同一请求在不同时刻调用得到的时间窗口不同。
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from models import (
    CompletionRateEntry, ComprehensiveAnalytics, EngagementMetrics, FeatureSummary,
    GrowthMetrics, PeriodAnalytics, WeeklyReport,
)
from services.aggregation import count_where, group_count, ratio_or_zero, shift_window, week_window
from services.features import extract_features

logger = logging.getLogger(__name__)


def growth_metrics(store, now: Optional[datetime] = None) -> GrowthMetrics:
    """最近 1 / 7 / 30 天新增用户数及总用户数"""
    now = now or datetime.now()
    return GrowthMetrics(
        daily_new_users=store.count_users_created_between(now - timedelta(days=1), now),
        weekly_new_users=store.count_users_created_between(now - timedelta(days=7), now),
        monthly_new_users=store.count_users_created_between(now - timedelta(days=30), now),
        total_users=store.count_users()
    )


def completion_rates_by_user(store) -> List[CompletionRateEntry]:
    """每个有任务的用户的完成率；找不到用户资料时只返回任务统计"""
    entries = []
    for user_id, completed, total in sorted(store.fetch_completion_counts_by_user()):
        user = store.fetch_user_by_id(user_id)
        entries.append(CompletionRateEntry(
            user_id=user_id,
            completed_count=completed,
            total_count=total,
            completion_rate=ratio_or_zero(completed, total),
            user_name=user.name if user else None,
            user_email=user.email if user else None
        ))
    return entries


def activity_patterns(store, user_id: str) -> FeatureSummary:
    return extract_features(store.fetch_todos_by_user(user_id))


def engagement_metrics(store, user_id: str, now: Optional[datetime] = None) -> EngagementMetrics:
    """用户参与度；用户不存在时返回空结果"""
    user = store.fetch_user_by_id(user_id)
    if user is None:
        logger.debug("engagement metrics: user %s not found", user_id)
        return EngagementMetrics()

    today = (now or datetime.now()).date()
    days_since_registration = None
    if user.created_at is not None:
        days_since_registration = (today - user.created_at.date()).days

    profile = user.profile_fields()
    filled = count_where(profile, lambda v: v is not None)

    memory = store.fetch_user_memory_by_user_id(user_id)
    memory_fields = {}
    if memory is not None:
        memory_fields = {
            "memory_last_updated": memory.updated_at,
            "has_task_preferences": memory.task_preferences is not None,
            "has_work_patterns": memory.work_patterns is not None,
            "has_interaction_history": memory.interaction_history is not None,
            "has_user_persona": memory.user_persona is not None,
            "has_memory_text": memory.memory_text is not None,
        }

    return EngagementMetrics(
        last_login=user.last_login,
        days_since_registration=days_since_registration,
        onboarding_complete=user.onboarding_complete,
        profile_completeness=filled / len(profile),
        total_todos=store.fetch_todo_count_by_user(user_id),
        has_memory=memory is not None,
        **memory_fields
    )


def weekly_report(store, user_id: str, now: Optional[datetime] = None) -> WeeklyReport:
    """本周（周一到周日）任务统计，并与历史平均和上一周对比"""
    today = (now or datetime.now()).date()
    week_start, week_end = week_window(today)

    todos = store.fetch_todos_by_user_and_date_range(user_id, week_start, week_end)
    total = len(todos)
    completed = count_where(todos, lambda t: t.is_completed)
    ai_generated = count_where(todos, lambda t: t.is_ai)
    with_due_date = count_where(todos, lambda t: t.due_date is not None)
    completion_rate = ratio_or_zero(completed, total)

    report = {
        "user_id": user_id,
        "week_start": week_start.date(),
        "week_end": week_end.date(),
        "total_todos_created": total,
        "completed_todos": completed,
        "completion_rate": completion_rate,
        "priority_breakdown": group_count(todos, lambda t: t.priority),
        "ai_generated_count": ai_generated,
        "ai_generated_percentage": ratio_or_zero(ai_generated, total),
        "with_due_date": with_due_date,
        "without_due_date": total - with_due_date,
    }

    # 没有任何历史任务时不做对比
    all_time = extract_features(store.fetch_todos_by_user(user_id))
    if all_time.todo_count > 0:
        prev_start, prev_end = shift_window(week_start, week_end, -7)
        prev_todos = store.fetch_todos_by_user_and_date_range(user_id, prev_start, prev_end)
        prev_total = len(prev_todos)
        prev_rate = ratio_or_zero(count_where(prev_todos, lambda t: t.is_completed), prev_total)

        report.update({
            "completion_rate_change_from_average": completion_rate - all_time.completion_rate,
            "prev_week_todo_count": prev_total,
            "prev_week_completion_rate": prev_rate,
            "todo_count_change_from_prev_week": total - prev_total,
            "completion_rate_change_from_prev_week": completion_rate - prev_rate,
        })

    return WeeklyReport(**report)


def period_analytics(store, start: datetime, end: datetime) -> PeriodAnalytics:
    """指定时间段内（含两端）所有用户创建的任务统计"""
    summary = extract_features(store.fetch_todos_by_date_range(start, end))
    return PeriodAnalytics(start_date=start, end_date=end, **dict(summary))


def comprehensive_analytics(store, user_id: str, now: Optional[datetime] = None) -> ComprehensiveAnalytics:
    now = now or datetime.now()
    return ComprehensiveAnalytics(
        task_analytics=activity_patterns(store, user_id),
        engagement_metrics=engagement_metrics(store, user_id, now),
        weekly_report=weekly_report(store, user_id, now)
    )
