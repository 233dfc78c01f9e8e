from typing import Iterable

from models import FeatureSummary, Todo
from services.aggregation import (
    count_where, group_count, most_frequent_day, ratio, weekday_histogram,
)


def extract_features(todos: Iterable[Todo]) -> FeatureSummary:
    """从一组任务中提取聚合特征"""
    todos = list(todos)
    total = len(todos)

    # 没有任务时只返回计数，调用方先判断 todo_count
    if total == 0:
        return FeatureSummary(todo_count=0)

    by_day = weekday_histogram(t.created_at for t in todos)
    most_active = most_frequent_day(by_day)

    completed = count_where(todos, lambda t: t.is_completed)
    with_due_date = count_where(todos, lambda t: t.due_date is not None)
    ai_generated = count_where(todos, lambda t: t.is_ai)

    return FeatureSummary(
        todo_count=total,
        completed_count=completed,
        completion_rate=ratio(completed, total),
        todos_by_day_of_week=by_day,
        active_day_count=len(by_day),
        most_active_day=most_active[0] if most_active else None,
        most_active_day_count=most_active[1] if most_active else None,
        with_due_date=with_due_date,
        without_due_date=total - with_due_date,
        priority_distribution=group_count(todos, lambda t: t.priority),
        ai_generated_count=ai_generated,
        ai_generated_percentage=ratio(ai_generated, total),
    )
