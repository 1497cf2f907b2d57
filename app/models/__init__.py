from app.models.checklist import ChecklistDay, ChecklistItem, ChecklistShift, ShiftKind
from app.models.restaurant import Restaurant, RestaurantConfig
from app.models.user import Role, UserProfile

__all__ = [
    "Restaurant",
    "RestaurantConfig",
    "ChecklistDay",
    "ChecklistShift",
    "ChecklistItem",
    "ShiftKind",
    "UserProfile",
    "Role",
]
