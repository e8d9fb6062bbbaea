from rest_framework.permissions import BasePermission


def user_role(user) -> str:
    profile = getattr(user, "profile", None)
    return getattr(profile, "role", "") if profile else ""


class IsCourseAdmin(BasePermission):
    """Erlaubt Zugriff nur für Benutzer mit der Rolle admin."""

    message = "Only admins can manage courses."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user_role(user) == "admin"


class IsCourseOwner(BasePermission):
    """Objekt-Berechtigung: nur der Ersteller des Kurses darf ändern."""

    message = "Only the course creator can modify this course."

    def has_object_permission(self, request, view, obj):
        owner_id = getattr(obj, "owner_id", None)
        if owner_id is None and hasattr(obj, "course"):
            owner_id = obj.course.owner_id
        return owner_id == request.user.id
