"""
Shared Pydantic base models.

StrictModel is for values this package creates itself. PermissiveModel is for
records read from session logs, whose shape we only partially model.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Base model with strict validation settings."""

    model_config = ConfigDict(
        extra='forbid',  # Raise error on unexpected fields
        strict=True,  # Strict type validation
        frozen=True,  # Immutable (cannot modify after creation)
    )


class PermissiveModel(BaseModel):
    """
    Base model for externally produced records.

    Unknown fields are kept (extra='allow') so a record can be dumped back
    with everything it carried. Known fields are still strictly typed.
    """

    model_config = ConfigDict(
        extra='allow',
        strict=True,
        frozen=True,
    )

    def get_extra_fields(self) -> dict[str, object]:
        """Get the fields captured beyond the modelled ones."""
        return dict(self.__pydantic_extra__) if self.__pydantic_extra__ else {}
