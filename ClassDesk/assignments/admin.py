from django.contrib import admin

from .models import Assignment, Notification, Submission


class SubmissionInline(admin.TabularInline):
    model = Submission
    extra = 0
    fields = ("student", "status", "created_at")
    readonly_fields = ("student", "created_at")
    can_delete = False


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("name", "classroom", "draft", "creator", "created_at")
    list_filter = ("draft",)
    search_fields = ("name", "id", "classroom__name")
    readonly_fields = ("id", "created_at", "updated_at")
    inlines = (SubmissionInline,)


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ("assignment", "student", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("assignment__name", "student__username", "student__email")


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("recipient", "assignment", "status", "attempts", "created_at", "sent_at")
    list_filter = ("status",)
    search_fields = ("recipient", "assignment__name")
    readonly_fields = ("created_at", "sent_at", "next_attempt_at", "last_error")
