"""
Base class for emoji registry components.
"""

from typing import Dict, List


class ComponentEmoji:
    """
    Base class for component-specific emoji collections.

    Subclasses declare emojis as upper-case class attributes.

    Example:
        >>> class MyEmoji(ComponentEmoji):
        ...     HELLO = "👋"
    """

    @classmethod
    def get_all(cls) -> Dict[str, str]:
        """
        Get all emoji definitions from this category.

        Returns:
            Dictionary mapping emoji name to emoji character
        """
        return {
            name: getattr(cls, name)
            for name in cls.list_names()
            if isinstance(getattr(cls, name), str)
        }

    @classmethod
    def list_names(cls) -> List[str]:
        """
        Get list of all emoji names in this category.

        Returns:
            List of emoji constant names
        """
        return [
            name for name in dir(cls) if not name.startswith("_") and name.isupper()
        ]
