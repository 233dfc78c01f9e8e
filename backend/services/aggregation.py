"""计数、分组、比率等通用统计工具"""
from datetime import date, datetime, time, timedelta
from typing import Callable, Dict, Iterable, Optional, Tuple

DAY_NAMES = ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY"]


def count_where(items: Iterable, predicate: Callable) -> int:
    """统计满足条件的元素个数"""
    return sum(1 for item in items if predicate(item))


def group_count(items: Iterable, key: Callable) -> Dict:
    """按 key 分组计数，键按首次出现顺序排列"""
    counts = {}
    for item in items:
        k = key(item)
        counts[k] = counts.get(k, 0) + 1
    return counts


def ratio(part: int, total: int) -> Optional[float]:
    """total 为 0 时没有定义，返回 None"""
    if total == 0:
        return None
    return part / total


def ratio_or_zero(part: int, total: int) -> float:
    return part / total if total > 0 else 0.0


def day_name(dt: datetime) -> str:
    return DAY_NAMES[dt.weekday()]


def weekday_histogram(timestamps: Iterable[datetime]) -> Dict[str, int]:
    """按星期分组计数，周一在前，只包含出现过的星期"""
    counts = [0] * 7
    for ts in timestamps:
        counts[ts.weekday()] += 1
    return {DAY_NAMES[i]: c for i, c in enumerate(counts) if c > 0}


def most_frequent_day(histogram: Dict[str, int]) -> Optional[Tuple[str, int]]:
    """出现次数最多的星期；并列时取靠前的一天（周一最前）"""
    best = None
    for name in DAY_NAMES:
        count = histogram.get(name, 0)
        if count > 0 and (best is None or count > best[1]):
            best = (name, count)
    return best


def week_window(today: date) -> Tuple[datetime, datetime]:
    """today 所在自然周：周一 00:00:00 到周日 23:59:59.999999"""
    monday = today - timedelta(days=today.weekday())
    sunday = monday + timedelta(days=6)
    return datetime.combine(monday, time.min), datetime.combine(sunday, time.max)


def shift_window(start: datetime, end: datetime, days: int) -> Tuple[datetime, datetime]:
    delta = timedelta(days=days)
    return start + delta, end + delta
