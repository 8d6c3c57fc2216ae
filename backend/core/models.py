import logging
from typing import List

from django.db import models
from django.db.models import Count

from bot.errors import ConsistencyError

__all__ = ['Like', 'Author', 'UnsupportedMessage']

logger = logging.getLogger(__name__)


class LikeManager(models.Manager):
    def toggle(self, post_id: int, reaction_type: int, user_id: int) -> bool:
        """
        Toggle user's reaction to the post.
        If reaction is the same - remove it.
        If user already reacted to this post with another kind - move vote to the new kind.

        Number of deleted rows for the exact reaction decides whether to insert,
        so it must not run concurrently for the same (post, user).
        Return True if vote was recorded.
        """
        existing, _ = self.filter(
            post_id=post_id,
            reaction_type=reaction_type,
            user_id=user_id,
        ).delete()
        self.filter(post_id=post_id, user_id=user_id).delete()
        if existing % 2 == 0:
            self.create(post_id=post_id, reaction_type=reaction_type, user_id=user_id)
            return True
        return False

    def tally(self, post_id: int, size: int) -> List[int]:
        """Count reactions of each kind. Unknown post gives zeros."""
        counts = [0] * size
        rows = (
            self.filter(post_id=post_id)
            .order_by()
            .values('reaction_type')
            .annotate(count=Count('id'))
        )
        for row in rows:
            reaction_type = row['reaction_type']
            if not 0 <= reaction_type < size:
                raise ConsistencyError(f"Bad reaction type {reaction_type} of post {post_id}.")
            counts[reaction_type] = row['count']
        return counts


class Like(models.Model):
    post_id = models.BigIntegerField(help_text="Telegram message ID in target chat.")
    reaction_type = models.SmallIntegerField(help_text="Index in reactions list.")
    user_id = models.BigIntegerField()

    objects = LikeManager()

    class Meta:
        db_table = 'likes'
        indexes = [
            models.Index(fields=['post_id', 'user_id'], name='likes_post_user_idx'),
        ]

    def __str__(self):
        return f"L({self.post_id} {self.reaction_type} {self.user_id})"


class AuthorManager(models.Manager):
    def record(self, post_id: int, author_id: int) -> 'Author':
        # message ids are unique only within one chat
        author, created = self.get_or_create(post_id=post_id, author_id=author_id)
        if not created:
            logger.debug(f"Author of {post_id} from {author_id} is already recorded.")
        return author


class Author(models.Model):
    post_id = models.BigIntegerField(db_index=True, help_text="ID of original message.")
    author_id = models.BigIntegerField(help_text="ID of chat the message came from.")

    objects = AuthorManager()

    class Meta:
        db_table = 'authors'

    def __str__(self):
        return f"Author({self.post_id}, {self.author_id})"


class UnsupportedMessageManager(models.Manager):
    def link(self, forwarded_post_id: int, keyboard_post_id: int) -> 'UnsupportedMessage':
        return self.create(
            forwarded_post_id=forwarded_post_id,
            keyboard_post_id=keyboard_post_id,
        )


class UnsupportedMessage(models.Model):
    """Forwarded message which can't hold keyboard and prompt message which holds it instead."""
    forwarded_post_id = models.BigIntegerField(db_index=True)
    keyboard_post_id = models.BigIntegerField()

    objects = UnsupportedMessageManager()

    class Meta:
        db_table = 'unsupported_messages'
        ordering = ('id',)

    def __str__(self):
        return f"UM({self.forwarded_post_id} -> {self.keyboard_post_id})"
