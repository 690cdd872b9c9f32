from .customer import Customer
from .board import Board
from .feedback import (
    Feedback,
    TYPE_CHOICES,
    STATUS_CHOICES,
    STATUS_OPEN,
    STATUS_IN_PROGRESS,
    STATUS_COMPLETED,
    STATUS_DECLINED,
)
from .vote import Vote
from .comment import Comment, CONTENT_MAX_LEN

__all__ = [
    "Customer",
    "Board",
    "Feedback",
    "Vote",
    "Comment",
    "TYPE_CHOICES",
    "STATUS_CHOICES",
    "STATUS_OPEN",
    "STATUS_IN_PROGRESS",
    "STATUS_COMPLETED",
    "STATUS_DECLINED",
    "CONTENT_MAX_LEN",
]
