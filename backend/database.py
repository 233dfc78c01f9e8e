import functools
from datetime import datetime
from typing import List, Optional, Tuple

from bson import ObjectId
from pydantic import ValidationError
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from config import MONGODB_URL, DATABASE_NAME, MONGODB_TIMEOUT_MS
from models import Todo, User, UserMemory

# MongoClient 首次查询时才会真正连接
client = MongoClient(MONGODB_URL, serverSelectionTimeoutMS=MONGODB_TIMEOUT_MS)
db = client[DATABASE_NAME]

# 集合
users_collection = db["users"]
todos_collection = db["todos"]
user_memories_collection = db["user_memories"]


class StoreError(Exception):
    """数据库不可用或查询失败"""


def ensure_indexes():
    """创建索引"""
    users_collection.create_index("createdAt")
    todos_collection.create_index([("userId", 1), ("createdAt", 1)])
    todos_collection.create_index("createdAt")
    user_memories_collection.create_index("userId", unique=True)


def _wrap_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (PyMongoError, ValidationError) as e:
            # 查询失败或文档格式不合法
            raise StoreError(f"{func.__name__}: {e}") from e
    return wrapper


def _id_filter(value: str):
    """字符串 id 和 ObjectId 都能匹配"""
    if ObjectId.is_valid(value):
        return {"$in": [value, ObjectId(value)]}
    return value


def _normalize(doc: dict) -> dict:
    doc["_id"] = str(doc["_id"])
    if doc.get("userId") is not None:
        doc["userId"] = str(doc["userId"])
    return doc


def _created_between(start: datetime, end: datetime) -> dict:
    return {"$gte": start, "$lte": end}


class MongoRecordStore:
    """只读的记录查询层，所有区间两端都包含"""

    def __init__(self, users=None, todos=None, user_memories=None):
        # Collection 不支持 bool()，这里必须用 is None 判断
        self.users = users_collection if users is None else users
        self.todos = todos_collection if todos is None else todos
        self.user_memories = user_memories_collection if user_memories is None else user_memories

    def _todos(self, query: dict) -> List[Todo]:
        return [Todo.model_validate(_normalize(doc)) for doc in self.todos.find(query)]

    @_wrap_errors
    def fetch_todos_by_user(self, user_id: str) -> List[Todo]:
        return self._todos({"userId": _id_filter(user_id)})

    @_wrap_errors
    def fetch_todos_by_date_range(self, start: datetime, end: datetime) -> List[Todo]:
        return self._todos({"createdAt": _created_between(start, end)})

    @_wrap_errors
    def fetch_todos_by_user_and_date_range(self, user_id: str, start: datetime, end: datetime) -> List[Todo]:
        return self._todos({
            "userId": _id_filter(user_id),
            "createdAt": _created_between(start, end)
        })

    @_wrap_errors
    def fetch_todo_count_by_user(self, user_id: str) -> int:
        return self.todos.count_documents({"userId": _id_filter(user_id)})

    @_wrap_errors
    def fetch_completion_counts_by_user(self) -> List[Tuple[str, int, int]]:
        """按用户分组统计 (user_id, 已完成数, 总数)"""
        pipeline = [
            {"$group": {
                "_id": "$userId",
                "completed": {"$sum": {"$cond": [{"$eq": ["$completed", True]}, 1, 0]}},
                "total": {"$sum": 1}
            }},
            {"$sort": {"_id": 1}}
        ]
        return [
            (str(row["_id"]), row["completed"], row["total"])
            for row in self.todos.aggregate(pipeline)
        ]

    @_wrap_errors
    def fetch_user_by_id(self, user_id: str) -> Optional[User]:
        doc = self.users.find_one({"_id": _id_filter(user_id)})
        return User.model_validate(_normalize(doc)) if doc else None

    @_wrap_errors
    def fetch_all_users(self) -> List[User]:
        return [User.model_validate(_normalize(doc)) for doc in self.users.find()]

    @_wrap_errors
    def fetch_user_memory_by_user_id(self, user_id: str) -> Optional[UserMemory]:
        doc = self.user_memories.find_one({"userId": _id_filter(user_id)})
        return UserMemory.model_validate(_normalize(doc)) if doc else None

    @_wrap_errors
    def count_users_created_between(self, start: datetime, end: datetime) -> int:
        return self.users.count_documents({"createdAt": _created_between(start, end)})

    @_wrap_errors
    def count_users(self) -> int:
        return self.users.count_documents({})
