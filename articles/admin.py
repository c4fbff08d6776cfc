from django.contrib import admin
from .models import Article


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display = ('title', 'author', 'author_type', 'category', 'status', 'published_at', 'view_count')
    list_filter = ('status', 'category', 'author_type')
    search_fields = ('title', 'content', 'author__email', 'author__name')
    readonly_fields = ('reviewed_by', 'reviewed_at', 'published_at', 'view_count', 'like_count')
