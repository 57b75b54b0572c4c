"""
DRF Views
=========

API endpoints for videos, comments, playlists and likes.

Every view:
1. Validates path ids before touching the database
2. Runs one read from queries.py or one write from services.py
3. Answers with the {statusCode, data, message, success} envelope

Failures are raised (ApiError / ValueError / DRF ValidationError) and
rendered by exceptions.custom_exception_handler.
"""

from django.conf import settings
from django.contrib.auth import get_user_model, login
from rest_framework import permissions
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from . import queries, services
from .exceptions import ApiError
from .models import Comment, Playlist, Video
from .pagination import paginate, parse_page_params
from .responses import api_response
from .serializers import (
    CommentCreateSerializer,
    CommentListSerializer,
    CommentSerializer,
    CommentUpdateSerializer,
    PlaylistCreateSerializer,
    PlaylistSerializer,
    PlaylistUpdateSerializer,
    VideoDetailSerializer,
    VideoListSerializer,
    VideoPublishSerializer,
    VideoSerializer,
)


def parse_id(raw, message: str) -> int:
    """Path id as int, or 400 with `message`."""
    if not queries.is_valid_id(raw):
        raise ApiError(400, message)
    return int(raw)


def uploaded_file_path(request, field: str) -> str | None:
    """
    Local path of an uploaded file.

    FILE_UPLOAD_HANDLERS only keeps the temporary-file handler, so every
    upload lands on disk.
    """
    upload = request.FILES.get(field)
    if upload is None:
        return None
    temporary_file_path = getattr(upload, 'temporary_file_path', None)
    return temporary_file_path() if temporary_file_path else None


# ============================================================================
# VIDEOS
# ============================================================================

class VideoListCreateView(APIView):
    """
    GET  /api/v1/videos/?page=&limit=
    POST /api/v1/videos/   (multipart: title, description, videoFile, thumbnail)

    query, sortBy, sortType and userId are accepted but not applied.
    """
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get(self, request):
        page, limit = parse_page_params(request.query_params)
        data = paginate(
            queries.get_video_list(),
            page,
            limit,
            lambda rows: VideoListSerializer(rows, many=True).data
        )
        return api_response(data, "All video fetch successful")

    def post(self, request):
        serializer = VideoPublishSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        video = services.publish_video(
            request.user,
            title=serializer.validated_data['title'],
            description=serializer.validated_data['description'],
            video_path=uploaded_file_path(request, 'videoFile'),
            thumbnail_path=uploaded_file_path(request, 'thumbnail'),
        )
        return api_response(VideoSerializer(video).data, "Video published successfully")


class VideoDetailView(APIView):
    """
    GET    /api/v1/videos/<video_id>/
    DELETE /api/v1/videos/<video_id>/
    """

    def get(self, request, video_id):
        video_id = parse_id(video_id, "Invalid Video Id")

        # Counted before the read, whatever the read finds.
        services.record_view(video_id)

        video = queries.get_published_video_detail(video_id, request.user.id)
        services.add_to_watch_history(request.user, video_id)

        data = VideoDetailSerializer(video).data if video is not None else None
        return api_response(data, "Video fetched successfully")

    def delete(self, request, video_id):
        video_id = parse_id(video_id, "Invalid video Id")

        video = queries.get_owned_video(video_id, request.user.id)
        if video is None:
            raise ApiError(400, "Video not available")

        services.delete_video(video)
        return api_response({}, "video deleted successfully")


class VideoThumbnailView(APIView):
    """
    PATCH /api/v1/videos/<video_id>/thumbnail/   (multipart: thumbnail)
    """
    parser_classes = [MultiPartParser, FormParser]

    def patch(self, request, video_id):
        video_id = parse_id(video_id, "Video id not available")

        video = queries.get_owned_video(video_id, request.user.id)
        if video is None:
            raise ApiError(400, "Video not available")

        video = services.replace_thumbnail(video, uploaded_file_path(request, 'thumbnail'))
        return api_response(VideoSerializer(video).data, "Thumbnail changed successful")


class VideoPublishToggleView(APIView):
    """
    PATCH /api/v1/videos/toggle/publish/<video_id>/

    Answers a bare {"success": true}, not the envelope.
    """

    def patch(self, request, video_id):
        video_id = parse_id(video_id, "Video id not available")

        video = queries.get_owned_video(video_id, request.user.id)
        if video is None:
            raise ApiError(400, "Video not available")

        services.toggle_publish(video)
        return Response({'success': True})


# ============================================================================
# COMMENTS
# ============================================================================

class VideoCommentsView(APIView):
    """
    GET  /api/v1/comments/<video_id>/?page=&limit=
    POST /api/v1/comments/<video_id>/   {"content": "..."}
    """

    def get(self, request, video_id):
        video_id = parse_id(video_id, "Invalid video Id")
        page, limit = parse_page_params(request.query_params)
        data = paginate(
            queries.get_video_comments(video_id, request.user.id),
            page,
            limit,
            lambda rows: CommentListSerializer(rows, many=True).data
        )
        return api_response(data, "Comment Fetched Successfully")

    def post(self, request, video_id):
        video_id = parse_id(video_id, "Invalid video Id")

        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if not Video.objects.filter(id=video_id).exists():
            raise ApiError(400, "Invalid video Id")

        comment = Comment.objects.create(
            content=serializer.validated_data['content'],
            video_id=video_id,
            owner=request.user,
        )
        return api_response(CommentSerializer(comment).data, "comment posted successfully")


class CommentDetailView(APIView):
    """
    PATCH  /api/v1/comments/c/<comment_id>/   {"content": "..."}
    DELETE /api/v1/comments/c/<comment_id>/

    No ownership check on either.
    """

    def patch(self, request, comment_id):
        comment_id = parse_id(comment_id, "Invalid comment Id")

        serializer = CommentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = Comment.objects.filter(id=comment_id).first()
        if comment is None:
            raise ApiError(400, "Something went wrong while db operation")

        comment.content = serializer.validated_data['content']
        comment.save(update_fields=['content', 'updated_at'])
        return api_response(CommentSerializer(comment).data, "comment updated successfully")

    def delete(self, request, comment_id):
        comment_id = parse_id(comment_id, "Invalid comment Id")

        deleted_count, _ = Comment.objects.filter(id=comment_id).delete()
        if not deleted_count:
            raise ApiError(400, "Something went wrong while db operation")
        return api_response({}, "comment deleted successfully")


# ============================================================================
# PLAYLISTS
# ============================================================================

class PlaylistCreateView(APIView):
    """
    POST /api/v1/playlist/   {"name": "...", "description": "..."?}
    """

    def post(self, request):
        serializer = PlaylistCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        playlist = Playlist.objects.create(
            name=serializer.validated_data['name'],
            description=serializer.validated_data['description'],
            owner=request.user,
        )
        return api_response(PlaylistSerializer(playlist).data, "Playlist created successfully")


class UserPlaylistsView(APIView):
    """
    GET /api/v1/playlist/user/<user_id>/

    An empty result is a 400, not an empty list.
    """

    def get(self, request, user_id):
        user_id = parse_id(user_id, "Invalid User ID")

        playlists = queries.get_user_playlists(user_id)
        if not playlists:
            raise ApiError(400, "No playlist available")
        return api_response(
            PlaylistSerializer(playlists, many=True).data,
            "Playlist fetched successfully"
        )


class PlaylistDetailView(APIView):
    """
    GET    /api/v1/playlist/<playlist_id>/
    PATCH  /api/v1/playlist/<playlist_id>/   {"name": "...", "description": "..."}
    DELETE /api/v1/playlist/<playlist_id>/

    Unlike create, update requires description. No ownership checks.
    """

    def get(self, request, playlist_id):
        playlist_id = parse_id(playlist_id, "Invalid Playlist ID")

        playlist = queries.get_playlist(playlist_id)
        if playlist is None:
            raise ApiError(400, "Invalid Playlist Id")
        return api_response(PlaylistSerializer(playlist).data, "Playlist fetched successfully")

    def patch(self, request, playlist_id):
        playlist_id = parse_id(playlist_id, "Invalid Playlist ID")

        serializer = PlaylistUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        playlist = Playlist.objects.filter(id=playlist_id).first()
        if playlist is None:
            raise ApiError(400, "Something went wrong while db operation")

        playlist.name = serializer.validated_data['name']
        playlist.description = serializer.validated_data['description']
        playlist.save(update_fields=['name', 'description', 'updated_at'])
        return api_response({}, "Playlist updated successfully")

    def delete(self, request, playlist_id):
        playlist_id = parse_id(playlist_id, "Invalid Playlist ID")

        deleted_count, _ = Playlist.objects.filter(id=playlist_id).delete()
        if not deleted_count:
            raise ApiError(400, "Invalid Play List Id")
        return api_response({}, "Playlist deleted successfully")


class PlaylistAddVideoView(APIView):
    """
    PATCH /api/v1/playlist/add/<video_id>/<playlist_id>/
    """

    def patch(self, request, video_id, playlist_id):
        playlist_id = parse_id(playlist_id, "Invalid Playlist ID")
        video_id = parse_id(video_id, "Invalid Video ID")

        playlist = services.add_video_to_playlist(playlist_id, video_id)
        return api_response(PlaylistSerializer(playlist).data, "video added to playlist")


class PlaylistRemoveVideoView(APIView):
    """
    PATCH /api/v1/playlist/remove/<video_id>/<playlist_id>/
    """

    def patch(self, request, video_id, playlist_id):
        playlist_id = parse_id(playlist_id, "Invalid Playlist ID")
        video_id = parse_id(video_id, "Invalid Video ID")

        playlist = services.remove_video_from_playlist(playlist_id, video_id)
        return api_response(PlaylistSerializer(playlist).data, "video removed from playlist")


# ============================================================================
# LIKES
# ============================================================================

class LikeToggleView(APIView):
    """
    POST /api/v1/likes/toggle/v/<target_id>/
    POST /api/v1/likes/toggle/c/<target_id>/
    POST /api/v1/likes/toggle/t/<target_id>/

    Returns data {"isLiked": bool} after the toggle.
    """
    target_type = None

    def post(self, request, target_id):
        target_id = parse_id(target_id, f"Invalid {self.target_type} Id")

        result = services.toggle_like(request.user, self.target_type, target_id)
        message = "Like added successfully" if result.is_liked else "Like removed successfully"
        return api_response({'isLiked': result.is_liked}, message)


class LikedVideosView(APIView):
    """
    GET /api/v1/likes/videos/
    """

    def get(self, request):
        videos = queries.get_liked_videos(request.user.id)
        return api_response(
            VideoListSerializer(videos, many=True).data,
            "Liked videos fetched successfully"
        )


# ============================================================================
# HEALTH / DEVELOPMENT HELPERS
# ============================================================================

class HealthcheckView(APIView):
    """
    GET /api/v1/healthcheck/
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return api_response({'status': 'ok'}, "OK")


class MockAuthView(APIView):
    """
    POST /api/v1/auth/mock-login/

    DEVELOPMENT ONLY: session login without credentials.
    Creates the user if it doesn't exist. Answers 404 unless DEBUG is on.

    Body: { "username": "testuser" }
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        if not settings.DEBUG:
            raise ApiError(404, "Not found")

        username = request.data.get('username') or 'testuser'
        user, created = get_user_model().objects.get_or_create(
            username=username,
            defaults={'email': f'{username}@example.com', 'full_name': username}
        )
        login(request, user, backend='django.contrib.auth.backends.ModelBackend')

        return api_response(
            {'userId': user.id, 'username': user.username, 'created': created},
            "Logged in"
        )


class WhoAmIView(APIView):
    """
    GET /api/v1/auth/whoami/
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        if request.user.is_authenticated:
            data = {
                'authenticated': True,
                'userId': request.user.id,
                'username': request.user.username,
            }
        else:
            data = {'authenticated': False, 'userId': None, 'username': None}
        return api_response(data, "Current user")
