from django.db import models
from django.conf import settings
import uuid

from .reactions import apply_reaction, toggle_like


class ReactableMixin(models.Model):
    """Legacy likes plus emoji reactions, both kept as JSON lists."""
    likes = models.PositiveIntegerField(default=0)
    liked_by = models.JSONField(default=list, blank=True)
    reactions = models.JSONField(default=list, blank=True)

    class Meta:
        abstract = True

    def react(self, user, reaction_type):
        self.reactions = apply_reaction(self.reactions, user.uid, user.display_name, reaction_type)
        self.save(update_fields=['reactions', 'updated_at'])

    def toggle_like(self, user):
        self.liked_by, liked = toggle_like(self.liked_by, user.uid)
        self.likes = len(self.liked_by)
        self.save(update_fields=['liked_by', 'likes', 'updated_at'])
        return liked


class Post(ReactableMixin):
    """
    An animal encounter story shared by a community member.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    animal_name = models.CharField(max_length=255)
    experience = models.TextField()
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='posts')
    photo = models.ImageField(upload_to='posts/%Y/%m/', blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.animal_name} by {self.author}"


class Comment(ReactableMixin):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='comments')
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True, blank=True,
        related_name='replies'
    )
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='post_comments')
    text = models.TextField()
    is_edited = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"Comment by {self.author} on {self.post.animal_name}"
