from wanderlust.core.enums import TripRole

MANAGER_ROLES = {TripRole.OWNER, TripRole.ADMIN}


def can_create(role: TripRole) -> bool:
    return role is not TripRole.VIEWER


def can_modify(role: TripRole, is_creator: bool) -> bool:
    if role in MANAGER_ROLES:
        return True
    return is_creator and role is not TripRole.VIEWER


def can_delete(role: TripRole, is_creator: bool) -> bool:
    return role in MANAGER_ROLES or is_creator
