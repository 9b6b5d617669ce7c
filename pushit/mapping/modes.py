"""Resolution behaviour switches."""

from enum import Enum


class SelfReference(str, Enum):
    """What a variable without further references resolves to."""

    VALUE = "value"
    """Resolve to the variable's configured value (default)"""

    NAME = "name"
    """Resolve to the variable's own name (legacy behaviour)"""

    @classmethod
    def from_string(cls, value: str) -> "SelfReference":
        """Parse a self-reference mode from a config value.

        Args:
            value: ``"value"`` or ``"name"`` (case-insensitive)

        Returns:
            Matching SelfReference

        Raises:
            ValueError: If the value is not a known mode
        """
        normalized = value.strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode
        valid = ", ".join(mode.value for mode in cls)
        raise ValueError(f"Invalid selfReference '{value}'. Valid values: {valid}")
