import logging

from firebase_admin import auth, exceptions
from rest_framework import authentication
from rest_framework.exceptions import AuthenticationFailed

from .models import User

logger = logging.getLogger(__name__)


class FirebaseAuthentication(authentication.BaseAuthentication):
    """
    Authenticate end users with a Firebase ID token sent as
    ``Authorization: Bearer <token>``.

    The verified uid is mapped to a local ``User`` mirror, created with the
    ``user`` role the first time the uid is seen.
    """
    keyword = 'Bearer'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None

        if len(header) != 2:
            raise AuthenticationFailed('Invalid token header')

        try:
            token = header[1].decode()
        except UnicodeError:
            raise AuthenticationFailed('Invalid token header')

        try:
            decoded = auth.verify_id_token(token)
        except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError) as e:
            logger.warning(f"Rejected Firebase token: {e}")
            raise AuthenticationFailed('Invalid or expired token')
        except (ValueError, exceptions.FirebaseError) as e:
            logger.error(f"Firebase token verification failed: {e}")
            raise AuthenticationFailed('Invalid or expired token')

        uid = decoded.get('uid') or decoded.get('user_id') or decoded.get('sub')
        if not uid:
            raise AuthenticationFailed('No user ID in token')

        user, created = User.objects.sync_firebase_user(
            uid,
            email=decoded.get('email'),
            name=decoded.get('name'),
            photo_url=decoded.get('picture'),
        )
        if created:
            logger.info(f"Created local mirror for Firebase user {uid}")
        if not user.is_active:
            raise AuthenticationFailed('User account is disabled')

        return user, decoded

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'
