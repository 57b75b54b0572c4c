"""
Data Models for VidTube
=======================

Design Philosophy:
------------------
1. Users are a custom AUTH_USER_MODEL carrying channel fields
   (full_name, avatar) and the watch history.

2. Ordered id lists (watch history, playlist videos) are through-tables
   - Ordering comes from the insertion timestamp + id
   - Unique constraint per (owner list, video) backs the explicit pre-check

3. Likes use one nullable FK per target kind (video / comment / tweet)
   - A check constraint keeps exactly one target populated
   - Unique constraints prevent duplicate likes per (target, user)

4. No denormalized counters
   - like counts and subscriber counts are computed by annotate() in queries.py

Indexes Strategy:
-----------------
- comment.video + comment.created_at: listing comments for a video
- like.video / like.comment + like.liked_by: counting and "is liked" lookups
- subscription.channel + subscription.subscriber: subscriber counts
"""

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q
from django.utils import timezone


class User(AbstractUser):
    """
    Channel owner and viewer.

    watch_history is ordered by WatchHistoryEntry.watched_at.
    """
    full_name = models.CharField(max_length=150, blank=True)
    avatar = models.URLField(max_length=500, blank=True)
    watch_history = models.ManyToManyField(
        'Video',
        through='WatchHistoryEntry',
        related_name='watched_by',
        blank=True
    )

    def __str__(self):
        return self.username


class Video(models.Model):
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='videos',
        db_index=True
    )
    # Media host references
    video_public_id = models.CharField(max_length=255)
    video_url = models.URLField(max_length=500)
    thumbnail_public_id = models.CharField(max_length=255)
    thumbnail_url = models.URLField(max_length=500)

    title = models.CharField(max_length=300)
    description = models.TextField()
    duration = models.FloatField(default=0)
    views = models.PositiveIntegerField(default=0)
    is_published = models.BooleanField(default=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.title[:50]} by {self.owner.username}"


class Comment(models.Model):
    video = models.ForeignKey(
        Video,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    content = models.TextField()
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['video', 'created_at'], name='comment_video_created_idx'),
        ]

    def __str__(self):
        return f"Comment by {self.owner.username} on {self.video_id}"


class Tweet(models.Model):
    """Short text post. Only referenced here as a like target."""
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='tweets'
    )
    content = models.TextField()
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Tweet by {self.owner.username}"


class Playlist(models.Model):
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='playlists',
        db_index=True
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    videos = models.ManyToManyField(
        Video,
        through='PlaylistVideo',
        related_name='playlists',
        blank=True
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.name} ({self.owner.username})"

    def video_ids(self) -> list[int]:
        """Video ids in insertion order."""
        return [entry.video_id for entry in self.entries.all()]


class PlaylistVideo(models.Model):
    playlist = models.ForeignKey(
        Playlist,
        on_delete=models.CASCADE,
        related_name='entries'
    )
    video = models.ForeignKey(
        Video,
        on_delete=models.CASCADE,
        related_name='playlist_entries'
    )
    added_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['added_at', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['playlist', 'video'],
                name='unique_video_per_playlist'
            )
        ]


class WatchHistoryEntry(models.Model):
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='watch_entries'
    )
    video = models.ForeignKey(
        Video,
        on_delete=models.CASCADE,
        related_name='watch_entries'
    )
    watched_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['watched_at', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'video'],
                name='unique_video_per_watch_history'
            )
        ]


class Subscription(models.Model):
    subscriber = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='subscriptions'
    )
    channel = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='subscribers'
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['subscriber', 'channel'],
                name='unique_subscription'
            )
        ]
        indexes = [
            models.Index(fields=['channel', 'subscriber'], name='subscription_channel_idx'),
        ]

    def __str__(self):
        return f"{self.subscriber.username} -> {self.channel.username}"


class Like(models.Model):
    """
    A like on exactly one of video, comment or tweet.

    CONCURRENCY STRATEGY:
    - Partial unique constraints per (target, liked_by) at DB level
    - IntegrityError on a concurrent duplicate is handled in services.py
    """
    video = models.ForeignKey(
        Video,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='likes'
    )
    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='likes'
    )
    tweet = models.ForeignKey(
        Tweet,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='likes'
    )
    liked_by = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='likes'
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(video__isnull=False, comment__isnull=True, tweet__isnull=True)
                    | Q(video__isnull=True, comment__isnull=False, tweet__isnull=True)
                    | Q(video__isnull=True, comment__isnull=True, tweet__isnull=False)
                ),
                name='like_has_exactly_one_target'
            ),
            models.UniqueConstraint(
                fields=['video', 'liked_by'],
                condition=Q(video__isnull=False),
                name='unique_video_like_per_user'
            ),
            models.UniqueConstraint(
                fields=['comment', 'liked_by'],
                condition=Q(comment__isnull=False),
                name='unique_comment_like_per_user'
            ),
            models.UniqueConstraint(
                fields=['tweet', 'liked_by'],
                condition=Q(tweet__isnull=False),
                name='unique_tweet_like_per_user'
            ),
        ]
        indexes = [
            models.Index(fields=['video', 'liked_by'], name='like_video_user_idx'),
            models.Index(fields=['comment', 'liked_by'], name='like_comment_user_idx'),
        ]

    @property
    def target_kind(self) -> str:
        if self.video_id is not None:
            return 'video'
        if self.comment_id is not None:
            return 'comment'
        return 'tweet'

    def __str__(self):
        return f"{self.liked_by.username} liked {self.target_kind}"
