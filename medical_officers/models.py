from django.db import models
import uuid
from django.conf import settings


class MedicalOfficer(models.Model):
    """
    Professional profile of a user holding the medical_officer role.

    An officer can log in, write articles and answer chats only after an
    admin approves the profile.
    """
    SPECIALIZATION_CHOICES = (
        ('general', 'General'),
        ('toxicology', 'Toxicology'),
        ('emergency', 'Emergency'),
        ('wildlife_medicine', 'Wildlife Medicine'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='medical_officer')
    specialization = models.CharField(max_length=30, choices=SPECIALIZATION_CHOICES)
    license_number = models.CharField(max_length=50, unique=True)
    hospital = models.CharField(max_length=255, blank=True)
    is_approved = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} - {self.get_specialization_display()}"

    @property
    def name(self):
        return self.user.display_name

    @property
    def email(self):
        return self.user.email

    @property
    def is_active(self):
        return self.user.is_active

    @property
    def can_practice(self):
        """Approved and not deactivated."""
        return self.is_approved and self.user.is_active
