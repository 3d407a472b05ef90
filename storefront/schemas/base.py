# storefront/schemas/base.py
# Базовая pydantic-модель: camelCase в JSON, snake_case в Python.
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def dump(self) -> dict:
        """JSON-совместимый dict с camelCase ключами."""
        return self.model_dump(by_alias=True, mode="json")
