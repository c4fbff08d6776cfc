from django.contrib.auth.models import update_last_login
from rest_framework_simplejwt.tokens import RefreshToken


def issue_tokens(user):
    """
    Issue a local refresh/access token pair for an admin or medical officer
    and record the login time.
    """
    refresh = RefreshToken.for_user(user)
    # Add user roles to the token claims
    refresh['roles'] = [role.name for role in user.roles.all()]
    update_last_login(None, user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }
