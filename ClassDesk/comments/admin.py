from django.contrib import admin

from .models import Comment, PrivateComment


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("assignment", "author", "created_at")
    search_fields = ("body",)


@admin.register(PrivateComment)
class PrivateCommentAdmin(admin.ModelAdmin):
    list_display = ("submission", "author", "created_at")
    search_fields = ("body",)
