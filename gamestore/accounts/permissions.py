from rest_framework.permissions import BasePermission, SAFE_METHODS


# role checks on the authenticated user
class IsAdminRole(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == "admin")


class IsUserRole(BasePermission):
    allowed_roles = ["admin", "user"]

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role in self.allowed_roles)


# catalog: anyone reads, admin writes
class IsAdminOrReadOnly(IsAdminRole):
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return super().has_permission(request, view)
