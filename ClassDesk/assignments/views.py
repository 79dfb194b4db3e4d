# assignments/views.py
from ClassDesk.http import api_view, jok, json_body
from . import services

PUBLISH_FIELDS = ("name", "instructions", "draft")


@api_view("POST")
def create_draft(request, class_id):
    assignment_id = services.draft(class_id, request.user)
    return jok({"assignment_id": assignment_id}, code=201)


@api_view("PATCH", "DELETE")
def assignment_detail(request, class_id, pk):
    if request.method == "DELETE":
        services.delete(pk, class_id, request.user)
        return jok()

    data = json_body(request)
    fields = {k: data[k] for k in PUBLISH_FIELDS if k in data}
    assignment = services.publish(pk, class_id, request.user, fields)
    return jok({"assignment": assignment.as_dict()})


@api_view("GET")
def student_assignment(request, class_id, pk):
    return jok(services.student_view(pk, class_id, request.user))


@api_view("GET")
def teacher_assignment(request, class_id, pk):
    return jok(services.teacher_view(pk, class_id, request.user))
