"""Contract template assembly."""

from ppc_contracts.services.assembly.assembler import (
    DEFAULT_GOVERNING_STATE,
    ContractFamily,
    ContractVariant,
    Subtype,
    assemble,
    party_labels,
    select_variant,
)

__all__ = [
    "DEFAULT_GOVERNING_STATE",
    "ContractFamily",
    "ContractVariant",
    "Subtype",
    "assemble",
    "party_labels",
    "select_variant",
]
