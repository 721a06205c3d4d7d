"""Model package exports."""

from models.classification import RequestClassification, RequestType
from models.decision import ClarificationContext, DecisionAction, DecisionResult
from models.garment import GarmentItem, from_raw
from models.outfit_state import OutfitState, OutfitStateType, compute_outfit_state
from models.taxonomy import Zone, classify_zone

__all__ = [
    "ClarificationContext",
    "DecisionAction",
    "DecisionResult",
    "GarmentItem",
    "OutfitState",
    "OutfitStateType",
    "RequestClassification",
    "RequestType",
    "Zone",
    "classify_zone",
    "compute_outfit_state",
    "from_raw",
]
