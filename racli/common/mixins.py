"""
Mixins shared by settings-bearing classes.
"""

from __future__ import annotations

from typing import Any


class Configurable:
    """
    Resolves settings from explicit values with Config fallbacks.

    A value of None in the overrides means "not given on the command line or
    in ClientConfig" and falls through to the uppercase Config attribute,
    which already reflects the environment.
    """

    def apply_overrides(
        self,
        overrides: dict[str, Any],
        config_obj: Any,
        attr_list: list[str] | None = None,
    ) -> None:
        """
        Set each named attribute on self.

        Args:
            overrides: Explicit values keyed by lowercase attribute name
            config_obj: Config instance providing UPPERCASE defaults
            attr_list: Attribute names to resolve
        """
        for attr in attr_list or []:
            value = overrides.get(attr)
            if value is None:
                value = getattr(config_obj, attr.upper(), None)
            setattr(self, attr, value)
