from rest_framework.permissions import BasePermission


class IsTripMember(BasePermission):
    """
    Permission: User must own the trip or travel on it.
    """

    message = 'You must be a member of this trip.'

    def has_object_permission(self, request, view, obj):
        # obj is a Trip instance
        return obj.has_member(request.user)


class IsTripOwner(BasePermission):
    """
    Permission: User must be the trip owner.
    """

    message = 'Only the trip owner can do this.'

    def has_object_permission(self, request, view, obj):
        return obj.is_owner(request.user)
