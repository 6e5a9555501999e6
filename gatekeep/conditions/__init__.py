"""Condition persistence helpers."""

from .deserializer import ConditionDeserializer
from .serializer import ConditionSerializer, SerializedCondition

__all__ = ["ConditionSerializer", "ConditionDeserializer", "SerializedCondition"]
