from django.contrib import admin

from .models import Attachment, Link, UploadedFile


@admin.register(UploadedFile)
class UploadedFileAdmin(admin.ModelAdmin):
    list_display = ("name", "content_type", "size", "uploaded_by", "uploaded_at")
    search_fields = ("name",)


@admin.register(Link)
class LinkAdmin(admin.ModelAdmin):
    list_display = ("title", "url", "created_by", "created_at")
    search_fields = ("title", "url")


@admin.register(Attachment)
class AttachmentAdmin(admin.ModelAdmin):
    list_display = ("id", "owner_field", "uploader", "file", "link", "created_at")
    raw_id_fields = ("file", "link", "assignment", "submission", "announcement")
