"""Options controlling the registry to IR transformation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TransformOptions(BaseModel):
    """Options for ``RegistryToIRTransformer``.

    Attributes
    ----------
        include_aliases: Fold alias names into the ``aliases`` tuple of
            their canonical record.
        include_availability: Fold merge provenance into ``available_in``
            markers.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    include_aliases: bool = True
    include_availability: bool = True
