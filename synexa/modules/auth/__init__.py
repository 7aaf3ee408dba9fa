from synexa.modules.auth.dependencies import (
    get_current_user,
    require_roles,
    get_current_admin,
    get_current_parent,
)

__all__ = ["get_current_user", "require_roles", "get_current_admin", "get_current_parent"]
