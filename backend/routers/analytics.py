import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from datetime import datetime
from typing import List

from database import MongoRecordStore, StoreError
from models import (
    CompletionRateEntry, ComprehensiveAnalytics, EngagementMetrics, FeatureSummary,
    GrowthMetrics, PeriodAnalytics, SimilarityResult, WeeklyReport,
)
from services import reports
from services.similarity import find_similar_users

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["统计分析"])


def get_store() -> MongoRecordStore:
    return MongoRecordStore()


def _run(operation: str, func, *args, **kwargs):
    """数据库异常统一转成 500，不重试"""
    try:
        return func(*args, **kwargs)
    except StoreError as e:
        logger.exception("%s failed", operation)
        raise HTTPException(status_code=500, detail=f"Failed to fetch {operation}: {e}")


def _strip_tz(value: datetime) -> datetime:
    # 移除时区信息，与库中的本地时间比较
    if value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


@router.get("/growth", response_model=GrowthMetrics)
def get_growth_metrics(store: MongoRecordStore = Depends(get_store)):
    """用户增长（日/周/月新增及总数）"""
    return _run("user growth metrics", reports.growth_metrics, store)


@router.get("/todo/completion-rates", response_model=List[CompletionRateEntry],
            response_model_exclude_none=True)
def get_completion_rates(store: MongoRecordStore = Depends(get_store)):
    """各用户任务完成率"""
    return _run("completion rates", reports.completion_rates_by_user, store)


@router.get("/user/{user_id}/activity-patterns", response_model=FeatureSummary,
            response_model_exclude_none=True)
def get_activity_patterns(user_id: str, store: MongoRecordStore = Depends(get_store)):
    """用户活动模式"""
    return _run("activity patterns", reports.activity_patterns, store, user_id)


@router.get("/user/{user_id}/engagement", response_model=EngagementMetrics,
            response_model_exclude_none=True)
def get_engagement_metrics(user_id: str, store: MongoRecordStore = Depends(get_store)):
    """用户参与度"""
    return _run("engagement metrics", reports.engagement_metrics, store, user_id)


@router.get("/todo/analytics", response_model=PeriodAnalytics,
            response_model_exclude_none=True)
def get_todo_analytics(
    start_date: datetime = Query(..., alias="startDate", description="ISO-8601 开始时间"),
    end_date: datetime = Query(..., alias="endDate", description="ISO-8601 结束时间"),
    store: MongoRecordStore = Depends(get_store)
):
    """时间段内的任务统计"""
    start_date = _strip_tz(start_date)
    end_date = _strip_tz(end_date)
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="startDate 不能晚于 endDate")
    return _run("todo analytics", reports.period_analytics, store, start_date, end_date)


@router.get("/user/{user_id}/weekly-report", response_model=WeeklyReport,
            response_model_exclude_none=True)
def get_weekly_report(user_id: str, store: MongoRecordStore = Depends(get_store)):
    """用户周报"""
    return _run("weekly report", reports.weekly_report, store, user_id)


@router.get("/user/{user_id}/similar-users", response_model=List[SimilarityResult])
def get_similar_users(user_id: str, store: MongoRecordStore = Depends(get_store)):
    """行为模式相似的用户"""
    return _run("similar users", find_similar_users, store, user_id)


@router.get("/user/{user_id}/comprehensive", response_model=ComprehensiveAnalytics,
            response_model_exclude_none=True)
def get_comprehensive_analytics(user_id: str, store: MongoRecordStore = Depends(get_store)):
    """活动模式 + 参与度 + 周报"""
    return _run("user analytics", reports.comprehensive_analytics, store, user_id)
