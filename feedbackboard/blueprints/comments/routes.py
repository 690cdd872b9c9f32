from feedbackboard.extensions import limiter
from feedbackboard.services import comments as comment_service
from feedbackboard.services.identity import resolve_identity
from feedbackboard.utils.validators import as_bool
from ..responses import as_dicts, invalid, json_body, respond
from . import bp


def _to_dict(comment):
    return comment.to_dict()


@bp.get("/feedback/<int:feedback_id>/comments")
def list_comments(feedback_id):
    return respond(comment_service.list_for_feedback(feedback_id, identity=resolve_identity()), as_dicts)


@bp.get("/feedback/<int:feedback_id>/comments/count")
def comment_count(feedback_id):
    return respond(comment_service.count(feedback_id), lambda n: {"count": n})


@bp.post("/feedback/<int:feedback_id>/comments")
@limiter.limit("20 per minute")
def create_comment(feedback_id):
    result = comment_service.create(resolve_identity(), feedback_id, json_body().get("content"))
    return respond(result, _to_dict, status=201)


@bp.patch("/comments/<int:comment_id>")
def update_comment(comment_id):
    result = comment_service.update(resolve_identity(), comment_id, json_body().get("content"))
    return respond(result, _to_dict)


@bp.delete("/comments/<int:comment_id>")
def delete_comment(comment_id):
    return respond(comment_service.delete(resolve_identity(), comment_id))


@bp.post("/comments/<int:comment_id>/official")
def mark_official(comment_id):
    data = json_body()
    if "is_official" not in data:
        return invalid("is_official", "is_official is required")
    result = comment_service.mark_official(resolve_identity(), comment_id, as_bool(data.get("is_official")))
    return respond(result, _to_dict)

