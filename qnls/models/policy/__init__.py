from qnls.models.policy.purification import (
    PURIFICATION_POLICIES,
    BbpsswPurification,
    PurificationPolicy,
    SymmetricBbpsswPurification,
    make_purification_policy,
)
from qnls.models.policy.swapping import SWAP_POLICIES, ProductSwapPolicy, SwapPolicy, WernerSwapPolicy, make_swap_policy

__all__ = [
    "PURIFICATION_POLICIES",
    "SWAP_POLICIES",
    "BbpsswPurification",
    "ProductSwapPolicy",
    "PurificationPolicy",
    "SwapPolicy",
    "SymmetricBbpsswPurification",
    "WernerSwapPolicy",
    "make_purification_policy",
    "make_swap_policy",
]
