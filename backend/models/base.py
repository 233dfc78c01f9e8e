from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """字段名 snake_case，文档与 JSON 使用 camelCase"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
