from ClassDesk.http import api_view, jok, json_body
from . import services

CONTENT_FIELDS = ("file_id", "link_id", "url", "title")


def _content_fields(data):
    return {k: data[k] for k in CONTENT_FIELDS if data.get(k) is not None}


@api_view("POST")
def attach_to_assignment(request, class_id, assignment_id):
    content = _content_fields(json_body(request))
    resolved = services.attach_to_assignment(assignment_id, class_id, request.user, **content)
    return jok({"attachment": resolved}, code=201)


@api_view("POST")
def attach_to_submission(request, class_id, submission_id):
    content = _content_fields(json_body(request))
    resolved = services.attach_to_submission(submission_id, class_id, request.user, **content)
    return jok({"attachment": resolved}, code=201)
