import hmac

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from rest_framework import authentication, exceptions


class ApiKeyAuthentication(authentication.BaseAuthentication):
    header_name = "HTTP_X_API_KEY"

    def authenticate(self, request):
        api_key = request.META.get(self.header_name)
        if not api_key:
            return None

        valid_keys = getattr(settings, "STOCKOPS_API_KEYS", [])
        if not any(hmac.compare_digest(api_key, key) for key in valid_keys):
            raise exceptions.AuthenticationFailed("Invalid API key.")

        return (AnonymousUser(), api_key)

    def authenticate_header(self, request):
        return "X-API-Key"
