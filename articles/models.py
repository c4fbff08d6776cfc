from django.db import models
from django.conf import settings
from django.utils import timezone
import uuid

from .workflow import STATUS_CHOICES, DRAFT, next_status


class Article(models.Model):
    """
    Safety article written by a medical officer (or an admin) and moderated
    through the review workflow before it becomes public.
    """
    CATEGORY_CHOICES = [
        ('wildlife_safety', 'Wildlife Safety'),
        ('medical_advice', 'Medical Advice'),
        ('emergency_response', 'Emergency Response'),
        ('prevention', 'Prevention'),
        ('treatment', 'Treatment'),
    ]
    AUTHOR_TYPE_CHOICES = [
        ('medical_officer', 'Medical Officer'),
        ('admin', 'Admin'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    content = models.TextField()
    excerpt = models.TextField(blank=True)
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='articles')
    author_type = models.CharField(max_length=20, choices=AUTHOR_TYPE_CHOICES, default='medical_officer')
    category = models.CharField(max_length=50, choices=CATEGORY_CHOICES)
    tags = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=list, blank=True, help_text="List of {url, alt, caption} objects")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=DRAFT)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='reviewed_articles'
    )
    review_comments = models.TextField(blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    published_at = models.DateTimeField(null=True, blank=True)
    view_count = models.PositiveIntegerField(default=0)
    like_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Article"
        verbose_name_plural = "Articles"
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @classmethod
    def category_values(cls):
        return [value for value, _ in cls.CATEGORY_CHOICES]

    def apply_transition(self, action, actor=None, comments=None):
        """
        Move the article along the workflow and save it.

        Raises ``InvalidTransition`` when ``action`` is illegal from the
        current status.
        """
        self.status = next_status(self.status, action)
        now = timezone.now()

        if action in ('approve', 'reject'):
            self.reviewed_by = actor
            self.reviewed_at = now
            self.review_comments = comments or ''
        elif action == 'publish':
            self.published_at = now
        elif action == 'unpublish':
            self.published_at = None

        self.save()
        return self
