from .math_tools import MathTools
from .tier_table import Tier, TierTable

__all__ = ["MathTools", "Tier", "TierTable"]
