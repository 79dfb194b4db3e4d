from django.conf import settings
from django.db import models

from classes.ids import generate_id


class BaseComment(models.Model):
    id = models.CharField(primary_key=True, max_length=32, default=generate_id, editable=False)
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+")
    body = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["created_at"]

    def get_author_id(self):
        return self.author_id

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "author_id": self.author_id,
            "body": self.body,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Comment(BaseComment):
    """Public comment, visible to everyone in the class."""
    assignment = models.ForeignKey("assignments.Assignment", on_delete=models.CASCADE, related_name="comments")

    class Meta(BaseComment.Meta):
        pass

    def __str__(self):
        return f"Comment by {self.author} on {self.assignment}"


class PrivateComment(BaseComment):
    """Comment on a submission, visible to its student and the class staff."""
    submission = models.ForeignKey("assignments.Submission", on_delete=models.CASCADE, related_name="private_comments")

    class Meta(BaseComment.Meta):
        pass

    def __str__(self):
        return f"Private comment by {self.author} on {self.submission}"
