from django.contrib import admin
from .models import Post, Comment


class CommentInline(admin.TabularInline):
    model = Comment
    fk_name = 'post'
    extra = 0
    fields = ('author', 'text', 'parent', 'is_edited', 'likes')
    readonly_fields = ('likes',)


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ('animal_name', 'author', 'likes', 'created_at')
    search_fields = ('animal_name', 'experience', 'author__email', 'author__name')
    inlines = [CommentInline]


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ('post', 'author', 'parent', 'is_edited', 'created_at')
    list_filter = ('is_edited',)
    search_fields = ('text', 'author__email')
