"""
Status Taxonomy.
The four access-status labels shared by the resolution pipeline and the map renderer.
"""
from enum import Enum
from typing import Dict, List


class AccessStatus(str, Enum):
    """Legal/medical access status of a substance within one country."""
    APPROVED_MEDICAL_USE = "Approved Medical Use"
    BANNED = "Banned"
    LIMITED_ACCESS_TRIALS = "Limited Access Trials"
    UNKNOWN = "Unknown"

    @classmethod
    def labels(cls) -> List[str]:
        """Labels in canonical order."""
        return [status.value for status in cls]

    @classmethod
    def is_known(cls, label: str) -> bool:
        return label in cls._value2member_map_


# Map fill colours used by the renderer
STATUS_COLORS: Dict[AccessStatus, str] = {
    AccessStatus.APPROVED_MEDICAL_USE: "#27ae60",
    AccessStatus.BANNED: "#e74c3c",
    AccessStatus.LIMITED_ACCESS_TRIALS: "#f1c40f",
    AccessStatus.UNKNOWN: "#666666",
}


def resolve_display_status(label: str) -> AccessStatus:
    """
    Resolve a stored status string for display.

    Stored values are not guaranteed to be taxonomy labels; anything
    unrecognised is displayed as Unknown.

    Args:
        label: Stored access_status value

    Returns:
        Matching AccessStatus, or AccessStatus.UNKNOWN
    """
    if AccessStatus.is_known(label):
        return AccessStatus(label)
    return AccessStatus.UNKNOWN
