"""测试公共 fixture：内存版记录存储和记录构造函数"""

from datetime import datetime
from itertools import count

import pytest

from database import StoreError
from models import Todo, User, UserMemory

# 周三；本周为 2025-01-13（周一）到 2025-01-19（周日）
NOW = datetime(2025, 1, 15, 12, 0, 0)

_ids = count(1)


def make_todo(user_id="u1", created_at=NOW, completed=False, due_date=None,
              priority="medium", ai=False, todo_id=None):
    return Todo(
        id=todo_id or f"t{next(_ids)}",
        user_id=user_id,
        title="todo",
        completed=completed,
        created_at=created_at,
        due_date=due_date,
        priority=priority,
        is_ai_generated=ai,
    )


def make_user(user_id="u1", name="Alice", email=None, created_at=NOW, **fields):
    return User(
        id=user_id,
        name=name,
        email=email or f"{user_id}@example.com",
        created_at=created_at,
        **fields,
    )


class FakeRecordStore:
    """用列表实现 MongoRecordStore 的查询接口"""

    def __init__(self, users=(), todos=(), memories=(), fail=False):
        self.users = list(users)
        self.todos = list(todos)
        self.memories = list(memories)
        self.fail = fail

    def _check(self):
        if self.fail:
            raise StoreError("connection refused")

    def fetch_todos_by_user(self, user_id):
        self._check()
        return [t for t in self.todos if t.user_id == user_id]

    def fetch_todos_by_date_range(self, start, end):
        self._check()
        return [t for t in self.todos if start <= t.created_at <= end]

    def fetch_todos_by_user_and_date_range(self, user_id, start, end):
        self._check()
        return [t for t in self.fetch_todos_by_user(user_id) if start <= t.created_at <= end]

    def fetch_todo_count_by_user(self, user_id):
        return len(self.fetch_todos_by_user(user_id))

    def fetch_completion_counts_by_user(self):
        self._check()
        rows = {}
        for t in self.todos:
            completed, total = rows.get(t.user_id, (0, 0))
            rows[t.user_id] = (completed + (1 if t.completed else 0), total + 1)
        return [(uid, c, n) for uid, (c, n) in sorted(rows.items())]

    def fetch_user_by_id(self, user_id):
        self._check()
        return next((u for u in self.users if u.id == user_id), None)

    def fetch_all_users(self):
        self._check()
        return list(self.users)

    def fetch_user_memory_by_user_id(self, user_id):
        self._check()
        return next((m for m in self.memories if m.user_id == user_id), None)

    def count_users_created_between(self, start, end):
        self._check()
        return sum(1 for u in self.users if u.created_at and start <= u.created_at <= end)

    def count_users(self):
        self._check()
        return len(self.users)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store():
    return FakeRecordStore()


@pytest.fixture
def memory_factory():
    def _make(user_id="u1", **fields):
        return UserMemory(id=f"m-{user_id}", user_id=user_id, updated_at=NOW, **fields)
    return _make
