"""
Role based permission classes.

Each endpoint lists the roles allowed to call it; the classes below
are the building blocks.  ``HasRole`` builds a permission class for an
arbitrary set of roles so route guards read like the role tables in
the API documentation.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

from .models import User

ADMIN = User.ROLE_ADMIN
DOCTOR = User.ROLE_DOCTOR
WARD_MANAGER = User.ROLE_WARD_MANAGER
NURSE = User.ROLE_NURSE
RECEPTIONIST = User.ROLE_RECEPTIONIST

IPD_CLINICAL_ROLES = {ADMIN, DOCTOR, WARD_MANAGER}
IPD_CARE_ROLES = IPD_CLINICAL_ROLES | {NURSE}


def _role_of(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


def HasRole(*roles: str) -> type[BasePermission]:
    """Return a permission class granting access to the given roles only."""
    allowed = frozenset(roles)

    class _HasRole(BasePermission):
        message = "Insufficient permissions"

        def has_permission(self, request, view) -> bool:  # type: ignore[override]
            return _role_of(request) in allowed

    _HasRole.__name__ = "HasRole_" + "_".join(sorted(allowed))
    return _HasRole


class IsAdminRole(BasePermission):
    """Allow access only to hospital administrators."""
    message = "Insufficient permissions"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role_of(request) == ADMIN


class ReadOnly(BasePermission):
    """Allow read-only access (GET, HEAD, OPTIONS)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return request.method in SAFE_METHODS


CanViewAdmissions = HasRole(*IPD_CLINICAL_ROLES)
CanViewAdmissionCare = HasRole(*IPD_CARE_ROLES)
CanManageAdmissions = HasRole(ADMIN, DOCTOR)
CanViewWards = HasRole(ADMIN, WARD_MANAGER, DOCTOR)
CanManageWards = HasRole(ADMIN, WARD_MANAGER)
CanViewBeds = HasRole(*IPD_CARE_ROLES)
CanViewBillList = HasRole(ADMIN, DOCTOR, WARD_MANAGER, RECEPTIONIST)
CanViewBills = HasRole(ADMIN, DOCTOR, WARD_MANAGER, RECEPTIONIST, NURSE)
CanManageBills = HasRole(ADMIN, WARD_MANAGER, RECEPTIONIST)
