from typing import Any, Dict

from pydantic import BaseModel, Field


class SerializedCondition(BaseModel):
    data: Dict[str, Any] = Field(default_factory=dict, description="Serialized state")
    type: str = Field(..., description="Class name")
    module: str = Field(..., description="Module path")


class ConditionSerializer:
    """
    Serialize a condition so a persistent driver can rebuild it later.

    Conditions are stored by class reference plus their state, so only
    conditions defined at module level can be persisted.
    """

    @staticmethod
    def serialize(condition: Any) -> SerializedCondition:
        condition_type = type(condition).__qualname__
        condition_module = type(condition).__module__

        if "<locals>" in condition_type or condition_type == "function":
            raise ValueError(
                f"Cannot serialize condition '{condition_type}' from module "
                f"'{condition_module}': only module level classes are supported"
            )

        if hasattr(condition, "model_dump") and callable(condition.model_dump):
            try:
                data = condition.model_dump(mode="json")
            except Exception as e:
                raise ValueError(
                    f"Failed to serialize Pydantic condition {condition_type}: {e}"
                )
            return SerializedCondition(
                data=data, type=condition_type, module=condition_module
            )

        try:
            data = dict(vars(condition))
        except TypeError as e:
            raise ValueError(
                f"Cannot serialize condition of type '{condition_type}' from module '{condition_module}': {e}"
            )
        return SerializedCondition(data=data, type=condition_type, module=condition_module)
