# Models package
from .user import User, UserMemory
from .todo import Todo
from .analytics import (
    FeatureSummary, PeriodAnalytics, GrowthMetrics, CompletionRateEntry,
    EngagementMetrics, WeeklyReport, SimilarityResult, ComprehensiveAnalytics,
)
