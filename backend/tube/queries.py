"""
Read Query Compositions
=======================

Each function here is one read: a join of the requested rows with their
owners, subscriptions and likes, with every derived field computed by the
database in the same statement via annotate().

Derived fields:
- owner_subscribers_count: COUNT of Subscription rows whose channel is the owner
- owner_is_subscribed:     EXISTS a Subscription(channel=owner, subscriber=viewer)
- likes_count:             COUNT of Like rows pointing at the row
- is_liked:                EXISTS a Like(target=row, liked_by=viewer)

Correlated subqueries (Subquery/Exists) are used instead of Count() over
joins so that two one-to-many joins never multiply each other's rows.
"""

import re

from django.db.models import (
    BooleanField,
    Count,
    Exists,
    IntegerField,
    OuterRef,
    QuerySet,
    Subquery,
    Value,
)
from django.db.models.functions import Coalesce

from .models import Comment, Like, Playlist, PlaylistVideo, Subscription, Video, User

ID_PATTERN = re.compile(r'[1-9][0-9]*')


def _count_subquery(queryset: QuerySet, group_field: str) -> Coalesce:
    """
    SELECT COUNT(*) FROM <queryset> GROUP BY <group_field>, as a scalar.
    """
    counted = (
        queryset
        .order_by()
        .values(group_field)
        .annotate(total=Count('id'))
        .values('total')
    )
    return Coalesce(Subquery(counted, output_field=IntegerField()), Value(0))


def _subscribers_count():
    return _count_subquery(
        Subscription.objects.filter(channel=OuterRef('owner_id')),
        'channel'
    )


def _is_subscribed(viewer_id):
    if viewer_id is None:
        return Value(False, output_field=BooleanField())
    return Exists(
        Subscription.objects.filter(channel=OuterRef('owner_id'), subscriber_id=viewer_id)
    )


def _likes_count(target_field: str):
    return _count_subquery(
        Like.objects.filter(**{target_field: OuterRef('pk')}),
        target_field
    )


def _is_liked(target_field: str, viewer_id):
    if viewer_id is None:
        return Value(False, output_field=BooleanField())
    return Exists(
        Like.objects.filter(**{target_field: OuterRef('pk'), 'liked_by_id': viewer_id})
    )


def is_valid_id(raw) -> bool:
    """Ids are positive integers; anything else is rejected before any query."""
    return ID_PATTERN.fullmatch(str(raw or '').strip()) is not None


# ============================================================================
# VIDEOS
# ============================================================================

def get_video_list() -> QuerySet:
    """
    Every video with its owner summary.

    SELECT video.*, user.*, (SELECT COUNT(*) FROM subscription
                             WHERE channel_id = video.owner_id) AS owner_subscribers_count
    FROM video INNER JOIN user ON video.owner_id = user.id
    ORDER BY video.created_at, video.id

    No filtering: unpublished videos are listed too.
    """
    return (
        Video.objects
        .select_related('owner')
        .annotate(owner_subscribers_count=_subscribers_count())
        .order_by('created_at', 'id')
    )


def get_published_video_detail(video_id: int, viewer_id) -> Video | None:
    """
    One published video with owner stats and like stats for the viewer.

    Returns None when the video is missing or unpublished.
    """
    return (
        Video.objects
        .filter(id=video_id, is_published=True)
        .select_related('owner')
        .annotate(
            owner_subscribers_count=_subscribers_count(),
            owner_is_subscribed=_is_subscribed(viewer_id),
            likes_count=_likes_count('video'),
            is_liked=_is_liked('video', viewer_id),
        )
        .first()
    )


def get_owned_video(video_id: int, owner_id) -> Video | None:
    """The video only if `owner_id` owns it."""
    return Video.objects.filter(id=video_id, owner_id=owner_id).first()


def get_liked_videos(user_id) -> QuerySet:
    """
    Videos liked by the user, most recent like first.
    """
    liked_at = Like.objects.filter(video=OuterRef('pk'), liked_by_id=user_id).values('created_at')[:1]
    return (
        Video.objects
        .filter(likes__liked_by_id=user_id)
        .select_related('owner')
        .annotate(
            owner_subscribers_count=_subscribers_count(),
            liked_at=Subquery(liked_at),
        )
        .order_by('-liked_at', '-id')
    )


def is_in_watch_history(user_id, video_id: int) -> bool:
    return User.objects.filter(id=user_id, watch_entries__video_id=video_id).exists()


# ============================================================================
# COMMENTS
# ============================================================================

def get_video_comments(video_id: int, viewer_id) -> QuerySet:
    """
    Comments of a video with owner and like stats, oldest first.

    Query: 1 (owner JOIN + two correlated subqueries per row)
    """
    return (
        Comment.objects
        .filter(video_id=video_id)
        .select_related('owner')
        .annotate(
            likes_count=_likes_count('comment'),
            is_liked=_is_liked('comment', viewer_id),
        )
        .order_by('created_at', 'id')
    )


# ============================================================================
# PLAYLISTS
# ============================================================================

def get_user_playlists(user_id: int) -> list[Playlist]:
    return list(
        Playlist.objects
        .filter(owner_id=user_id)
        .prefetch_related('entries')
        .order_by('created_at', 'id')
    )


def get_playlist(playlist_id: int) -> Playlist | None:
    return Playlist.objects.prefetch_related('entries').filter(id=playlist_id).first()


def is_video_in_playlist(playlist_id: int, video_id: int) -> bool:
    """
    Targeted existence check, no playlist rows are loaded.
    """
    return PlaylistVideo.objects.filter(playlist_id=playlist_id, video_id=video_id).exists()
