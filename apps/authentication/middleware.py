from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken


class BearerTokenMiddleware:
    """Resolve JWT bearer credentials for views outside DRF (GraphQL)."""

    protected_prefixes = ('/graphql/',)

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path.startswith(self.protected_prefixes):
            raw_token = self.get_token_from_request(request)
            if raw_token is not None:
                auth = JWTAuthentication()
                try:
                    validated_token = auth.get_validated_token(raw_token)
                    request.user = auth.get_user(validated_token)
                except (InvalidToken, AuthenticationFailed):
                    # Resolvers decide what an anonymous caller may see
                    request.user = AnonymousUser()

        return self.get_response(request)

    def get_token_from_request(self, request):
        header = request.META.get('HTTP_AUTHORIZATION')
        if header and header.startswith('Bearer '):
            return header.split(' ')[1].encode('utf-8')
        return None
