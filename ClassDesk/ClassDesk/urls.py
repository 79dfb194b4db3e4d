from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("classes/<str:class_id>/assignments/", include("assignments.urls")),
    path("classes/<str:class_id>/", include("comments.urls")),
    path("classes/<str:class_id>/", include("attachments.urls")),
]
