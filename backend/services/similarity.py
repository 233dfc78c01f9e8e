"""基于行为特征的用户相似度

各项特征按权重打分，最后除以实际参与比较的权重之和，结果落在 [0, 1]。
只有两边都有定义的特征才参与比较。
"""
import logging
from typing import FrozenSet, List, NamedTuple

from config import SIMILARITY_THRESHOLD
from models import FeatureSummary, SimilarityResult
from services.features import extract_features

logger = logging.getLogger(__name__)

COMPLETION_RATE_WEIGHT = 3.0
MOST_ACTIVE_DAY_WEIGHT = 2.0
PRIORITY_DISTRIBUTION_WEIGHT = 2.5
AI_GENERATED_WEIGHT = 1.5

MATCH_MOST_ACTIVE_DAY = "mostActiveDay"


class SimilarityScore(NamedTuple):
    score: float
    matched: FrozenSet[str]


def priority_distribution_term(a: FeatureSummary, b: FeatureSummary) -> float:
    """优先级分布项，分布完全一致时得到满分权重"""
    dist_a = a.priority_distribution or {}
    dist_b = b.priority_distribution or {}
    labels = set(dist_a) | set(dist_b)
    if not labels:
        return 0.0

    # 固定求和顺序，保证交换参数时浮点结果一致
    total = 0.0
    for label in sorted(labels, key=lambda l: (l is not None, l or "")):
        share_a = dist_a.get(label, 0) / a.todo_count
        share_b = dist_b.get(label, 0) / b.todo_count
        total += 1.0 - abs(share_a - share_b)
    return total / len(labels) * PRIORITY_DISTRIBUTION_WEIGHT


def score_similarity(a: FeatureSummary, b: FeatureSummary) -> SimilarityScore:
    """计算两个用户特征的相似度，交换参数结果不变"""
    score = 0.0
    max_score = 0.0
    matched = set()

    if a.completion_rate is not None and b.completion_rate is not None:
        score += (1.0 - abs(a.completion_rate - b.completion_rate)) * COMPLETION_RATE_WEIGHT
        max_score += COMPLETION_RATE_WEIGHT

    if a.most_active_day is not None and b.most_active_day is not None:
        if a.most_active_day == b.most_active_day:
            score += MOST_ACTIVE_DAY_WEIGHT
            matched.add(MATCH_MOST_ACTIVE_DAY)
        max_score += MOST_ACTIVE_DAY_WEIGHT

    if a.priority_distribution and b.priority_distribution:
        score += priority_distribution_term(a, b)
        max_score += PRIORITY_DISTRIBUTION_WEIGHT

    if a.ai_generated_percentage is not None and b.ai_generated_percentage is not None:
        score += (1.0 - abs(a.ai_generated_percentage - b.ai_generated_percentage)) * AI_GENERATED_WEIGHT
        max_score += AI_GENERATED_WEIGHT

    if max_score == 0:
        return SimilarityScore(0.0, frozenset())
    return SimilarityScore(score / max_score, frozenset(matched))


def find_similar_users(store, user_id: str, threshold: float = SIMILARITY_THRESHOLD) -> List[SimilarityResult]:
    """找出行为模式相似的其他用户，按相似度降序"""
    subject = extract_features(store.fetch_todos_by_user(user_id))

    results = []
    for other in store.fetch_all_users():
        if other.id == user_id:
            continue

        other_summary = extract_features(store.fetch_todos_by_user(other.id))
        similarity = score_similarity(subject, other_summary)
        if similarity.score <= threshold:
            continue

        shared_patterns = {}
        if MATCH_MOST_ACTIVE_DAY in similarity.matched:
            shared_patterns["sharedMostActiveDay"] = subject.most_active_day

        results.append(SimilarityResult(
            user_id=other.id,
            user_name=other.name,
            similarity_score=similarity.score,
            shared_patterns=shared_patterns
        ))

    results.sort(key=lambda r: (-r.similarity_score, r.user_id))
    logger.debug("user %s: %d similar users above %.2f", user_id, len(results), threshold)
    return results
