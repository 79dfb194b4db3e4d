# assignments/urls.py
from django.urls import path
from . import views

app_name = "assignments"

urlpatterns = [
    path("", views.create_draft, name="create_draft"),
    path("<str:pk>/", views.assignment_detail, name="assignment_detail"),

    # Read views
    path("<str:pk>/student/", views.student_assignment, name="student_assignment"),
    path("<str:pk>/teacher/", views.teacher_assignment, name="teacher_assignment"),
]
