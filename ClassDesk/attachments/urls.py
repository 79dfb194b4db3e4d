from django.urls import path
from . import views

app_name = "attachments"

urlpatterns = [
    path("assignments/<str:assignment_id>/attachments/", views.attach_to_assignment, name="attach_to_assignment"),
    path("submissions/<str:submission_id>/attachments/", views.attach_to_submission, name="attach_to_submission"),
]
