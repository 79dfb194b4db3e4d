from django.urls import path
from . import views

app_name = "comments"

urlpatterns = [
    path("assignments/<str:assignment_id>/comments/", views.post_comment, name="post_comment"),
    path("submissions/<str:submission_id>/comments/", views.post_private_comment, name="post_private_comment"),
]
