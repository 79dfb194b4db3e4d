from ClassDesk.http import api_view, jok, json_body
from . import services


@api_view("POST")
def post_comment(request, class_id, assignment_id):
    body = json_body(request).get("body")
    return jok({"comment": services.post_comment(assignment_id, class_id, request.user, body)}, code=201)


@api_view("POST")
def post_private_comment(request, class_id, submission_id):
    body = json_body(request).get("body")
    return jok({"comment": services.post_private_comment(submission_id, class_id, request.user, body)}, code=201)
