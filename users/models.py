from django.db import models
from django.contrib.auth.models import AbstractUser, UserManager as BaseUserManager
from django.utils.translation import gettext_lazy as _
import uuid


ROLE_ADMIN = 'admin'
ROLE_MEDICAL_OFFICER = 'medical_officer'
ROLE_USER = 'user'


class Role(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class UserManager(BaseUserManager):
    def with_role(self, role_name):
        return self.filter(roles__name=role_name)

    def sync_firebase_user(self, uid, email=None, name=None, photo_url=None):
        """
        Return the local mirror of a Firebase user, creating it on first sight.

        Emails are unique locally but not across Firebase uids and local
        accounts, so an email already held by another account is not copied.
        """
        stored_email = email or None
        if stored_email and self.filter(email__iexact=stored_email).exclude(firebase_uid=uid).exists():
            stored_email = None
        user, created = self.get_or_create(
            firebase_uid=uid,
            defaults={
                'username': uid,
                'email': stored_email,
                'name': name or email or '',
                'photo_url': photo_url or '',
            }
        )
        if created:
            user.set_unusable_password()
            user.save(update_fields=['password'])
            user.add_role(ROLE_USER)
        return user, created


class User(AbstractUser):
    """
    Local account for admins and medical officers, and the local mirror of
    Firebase-authenticated end users.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(_('email address'), unique=True, null=True, blank=True)
    name = models.CharField(max_length=150, blank=True)
    phone_number = models.CharField(max_length=20, blank=True)
    photo_url = models.URLField(max_length=500, blank=True)
    firebase_uid = models.CharField(max_length=128, unique=True, null=True, blank=True)
    roles = models.ManyToManyField(Role, related_name='users')

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def __str__(self):
        return self.email or self.username

    @property
    def display_name(self):
        return self.name or self.get_full_name() or self.email or self.username

    @property
    def uid(self):
        """Identifier used in chat threads and reactions."""
        return self.firebase_uid or str(self.id)

    def has_role(self, role_name):
        return self.roles.filter(name=role_name).exists()

    def add_role(self, role_name):
        role, created = Role.objects.get_or_create(name=role_name)
        self.roles.add(role)
        return role
