from pydantic import ConfigDict, Field
from typing import Any, Optional
from datetime import datetime

from .base import CamelModel


class User(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(alias="_id")
    email: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    onboarding_complete: Optional[bool] = None
    work_description: Optional[str] = None
    short_term_goals: Optional[str] = None
    long_term_goals: Optional[str] = None
    other_context: Optional[str] = None

    def profile_fields(self) -> list:
        """参与资料完整度计算的字段"""
        return [
            self.name,
            self.work_description,
            self.short_term_goals,
            self.long_term_goals,
            self.other_context,
        ]


class UserMemory(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(alias="_id")
    user_id: str
    updated_at: Optional[datetime] = None
    # JSON 内容不透明，只关心是否存在
    task_preferences: Optional[Any] = None
    work_patterns: Optional[Any] = None
    interaction_history: Optional[Any] = None
    user_persona: Optional[Any] = None
    memory_text: Optional[str] = None
