from pydantic import ConfigDict, Field
from typing import Optional
from datetime import datetime

from .base import CamelModel


class Todo(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(alias="_id")
    user_id: str
    title: Optional[str] = None
    completed: Optional[bool] = False
    created_at: datetime
    due_date: Optional[datetime] = None
    priority: Optional[str] = None  # 原样保留，不做大小写归一
    is_ai_generated: Optional[bool] = Field(default=False, alias="isAIGenerated")

    @property
    def is_completed(self) -> bool:
        return self.completed is True

    @property
    def is_ai(self) -> bool:
        return self.is_ai_generated is True
