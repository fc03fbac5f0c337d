import strawberry


class IsAuthenticated(strawberry.BasePermission):
    message = "Authentication required"

    def has_permission(self, source, info, **kwargs) -> bool:
        user = info.context.request.user
        return bool(user and user.is_authenticated)
