from django.contrib import admin

from .models import Announcement, ClassMembership, Classroom


class MembershipInline(admin.TabularInline):
    model = ClassMembership
    extra = 0
    autocomplete_fields = ("user",)


@admin.register(Classroom)
class ClassroomAdmin(admin.ModelAdmin):
    list_display = ("name", "id", "created_at")
    search_fields = ("name", "id")
    inlines = (MembershipInline,)


@admin.register(ClassMembership)
class ClassMembershipAdmin(admin.ModelAdmin):
    list_display = ("user", "classroom", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("user__username", "user__email", "classroom__name")


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ("classroom", "author", "created_at")
    search_fields = ("body",)
