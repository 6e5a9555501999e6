import importlib
from typing import Any

from pydantic import BaseModel

from .serializer import SerializedCondition


class ConditionDeserializer:
    """
    Reconstruct a condition from its serialized class reference and state.

    Supports:
    - Pydantic models
    - Plain classes whose constructor accepts their instance attributes
    """

    @staticmethod
    def deserialize(serialized: SerializedCondition) -> Any:
        try:
            module = importlib.import_module(serialized.module)

            condition_class: Any = module
            for part in serialized.type.split("."):
                condition_class = getattr(condition_class, part)

            if issubclass(condition_class, BaseModel):
                return condition_class.model_validate(serialized.data)

            return condition_class(**serialized.data)

        except Exception as e:
            raise ValueError(
                f"Failed to reconstruct condition '{serialized.type}' from module '{serialized.module}': {e}"
            )
