"""
Write Services
==============

Multi-step writes behind the views:
1. Publishing a video (media uploads, duration probe, record creation)
2. Deleting / re-thumbnailing a video (media host first, then the row)
3. View counting and watch history
4. Playlist membership
5. Like toggling

TRANSACTION STRATEGY:
--------------------
None of the multi-step operations here run in a transaction:
- media host calls cannot be rolled back anyway
- check-then-append (playlist, watch history) is two statements; the unique
  constraints on the through-tables turn a lost race into an IntegrityError
  instead of a duplicate row

Single-row updates (view counter, like rows) are atomic in the database.
"""

import logging
import subprocess
from typing import Literal

from django.db import IntegrityError, transaction
from django.db.models import F

from . import media
from .exceptions import ApiError
from .models import Comment, Like, Playlist, PlaylistVideo, Tweet, User, Video, WatchHistoryEntry
from .queries import is_in_watch_history, is_video_in_playlist

logger = logging.getLogger(__name__)


# ============================================================================
# VIDEOS
# ============================================================================

def publish_video(
    owner: User,
    *,
    title: str,
    description: str,
    video_path: str | None,
    thumbnail_path: str | None,
) -> Video:
    """
    Upload video then thumbnail, probe duration, create the record.

    A thumbnail failure leaves the already uploaded video asset in place.
    """
    video_file = media.upload_on_storage(video_path)
    thumbnail = media.upload_on_storage(thumbnail_path)

    if not video_file:
        raise ValueError("Video file is required")
    if not thumbnail:
        raise ValueError("Thumbnail file is required")

    try:
        duration = media.get_video_duration(video_file['url'])
    except (RuntimeError, OSError, subprocess.SubprocessError) as exc:
        # Both assets stay on the media host.
        logger.error("Duration probe failed for %s: %s", video_file['public_id'], exc)
        raise ApiError(500, "Something went wrong while processing the video") from exc

    video = Video.objects.create(
        owner=owner,
        video_public_id=video_file['public_id'],
        video_url=video_file['url'],
        thumbnail_public_id=thumbnail['public_id'],
        thumbnail_url=thumbnail['url'],
        title=title,
        description=description,
        duration=duration,
    )
    logger.info("Video %s published by user %s", video.id, owner.id)
    return video


def delete_video(video: Video) -> None:
    """Remove both assets from the media host, then the row."""
    media.delete_video_asset(video.video_public_id)
    media.delete_image_asset(video.thumbnail_public_id)
    video.delete()


def replace_thumbnail(video: Video, thumbnail_path: str | None) -> Video:
    """
    Drop the old thumbnail asset, upload the new one, save.

    The old asset is deleted before the new file is even checked.
    """
    media.delete_image_asset(video.thumbnail_public_id)

    if not thumbnail_path:
        raise ValueError("Thumbnail file is missing")

    thumbnail = media.upload_on_storage(thumbnail_path)
    if not thumbnail:
        raise ValueError("Error while uploading on thumbnail")

    video.thumbnail_public_id = thumbnail['public_id']
    video.thumbnail_url = thumbnail['url']
    video.save(update_fields=['thumbnail_public_id', 'thumbnail_url', 'updated_at'])
    return video


def toggle_publish(video: Video) -> Video:
    """Flip is_published, writing only that column and the timestamp (no model validation)."""
    video.is_published = not video.is_published
    video.save(update_fields=['is_published', 'updated_at'])
    return video


def record_view(video_id: int) -> None:
    """
    Atomic views + 1. A missing id updates nothing and is not an error.
    """
    Video.objects.filter(id=video_id).update(views=F('views') + 1)


def add_to_watch_history(user: User, video_id: int) -> bool:
    """
    Append to the user's watch history unless already there.

    Returns True when an entry was added. Ids with no video row are skipped.
    """
    if is_in_watch_history(user.id, video_id):
        return False
    if not Video.objects.filter(id=video_id).exists():
        return False
    try:
        with transaction.atomic():
            WatchHistoryEntry.objects.create(user=user, video_id=video_id)
    except IntegrityError:
        # A concurrent request appended it first.
        return False
    return True


# ============================================================================
# PLAYLISTS
# ============================================================================

def add_video_to_playlist(playlist_id: int, video_id: int) -> Playlist:
    if is_video_in_playlist(playlist_id, video_id):
        raise ValueError("Video already exist in playlist")

    playlist = Playlist.objects.filter(id=playlist_id).first()
    if playlist is None:
        raise ValueError("Something went wrong while db operation")
    if not Video.objects.filter(id=video_id).exists():
        raise ValueError("Invalid Video ID")

    try:
        with transaction.atomic():
            PlaylistVideo.objects.create(playlist=playlist, video_id=video_id)
    except IntegrityError:
        raise ValueError("Video already exist in playlist")

    playlist.save(update_fields=['updated_at'])
    return playlist


def remove_video_from_playlist(playlist_id: int, video_id: int) -> Playlist:
    """Idempotent pull: removing an absent video is not an error."""
    playlist = Playlist.objects.filter(id=playlist_id).first()
    if playlist is None:
        raise ValueError("Something went wrong while db operation")
    PlaylistVideo.objects.filter(playlist=playlist, video_id=video_id).delete()
    return playlist


# ============================================================================
# LIKES
# ============================================================================

TargetType = Literal['video', 'comment', 'tweet']

TARGET_MODELS = {
    'video': Video,
    'comment': Comment,
    'tweet': Tweet,
}


class LikeResult:
    """Result of a like toggle."""
    def __init__(self, success: bool, action: Literal['created', 'removed', 'already_exists']):
        self.success = success
        self.action = action

    @property
    def is_liked(self) -> bool:
        return self.action in ('created', 'already_exists')


def toggle_like(user: User, target_type: TargetType, target_id: int) -> LikeResult:
    """
    Remove the user's like on the target if present, otherwise create it.

    NOT atomic across check-and-toggle. The unique constraint turns a
    concurrent double-create into 'already_exists'.
    """
    model = TARGET_MODELS.get(target_type)
    if model is None:
        raise ValueError(f"Invalid target_type: {target_type}")
    if not model.objects.filter(id=target_id).exists():
        raise ValueError(f"Invalid {target_type} Id")

    lookup = {f'{target_type}_id': target_id, 'liked_by': user}
    deleted_count, _ = Like.objects.filter(**lookup).delete()
    if deleted_count:
        return LikeResult(success=True, action='removed')

    try:
        with transaction.atomic():
            Like.objects.create(**lookup)
    except IntegrityError:
        return LikeResult(success=False, action='already_exists')
    return LikeResult(success=True, action='created')
