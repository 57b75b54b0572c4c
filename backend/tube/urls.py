"""
Tube App URL Configuration

Ids are captured as plain strings so malformed ids reach the view and get
the 400 envelope instead of a router 404.
"""
from django.urls import path

from .views import (
    CommentDetailView,
    HealthcheckView,
    LikedVideosView,
    LikeToggleView,
    MockAuthView,
    PlaylistAddVideoView,
    PlaylistCreateView,
    PlaylistDetailView,
    PlaylistRemoveVideoView,
    UserPlaylistsView,
    VideoCommentsView,
    VideoDetailView,
    VideoListCreateView,
    VideoPublishToggleView,
    VideoThumbnailView,
    WhoAmIView,
)

urlpatterns = [
    # Videos
    path('videos/', VideoListCreateView.as_view(), name='video-list'),
    path('videos/toggle/publish/<str:video_id>/', VideoPublishToggleView.as_view(), name='video-toggle-publish'),
    path('videos/<str:video_id>/', VideoDetailView.as_view(), name='video-detail'),
    path('videos/<str:video_id>/thumbnail/', VideoThumbnailView.as_view(), name='video-thumbnail'),

    # Comments
    path('comments/c/<str:comment_id>/', CommentDetailView.as_view(), name='comment-detail'),
    path('comments/<str:video_id>/', VideoCommentsView.as_view(), name='video-comments'),

    # Playlists
    path('playlist/', PlaylistCreateView.as_view(), name='playlist-create'),
    path('playlist/user/<str:user_id>/', UserPlaylistsView.as_view(), name='user-playlists'),
    path('playlist/add/<str:video_id>/<str:playlist_id>/', PlaylistAddVideoView.as_view(), name='playlist-add-video'),
    path('playlist/remove/<str:video_id>/<str:playlist_id>/', PlaylistRemoveVideoView.as_view(), name='playlist-remove-video'),
    path('playlist/<str:playlist_id>/', PlaylistDetailView.as_view(), name='playlist-detail'),

    # Likes
    path('likes/toggle/v/<str:target_id>/', LikeToggleView.as_view(target_type='video'), name='like-video'),
    path('likes/toggle/c/<str:target_id>/', LikeToggleView.as_view(target_type='comment'), name='like-comment'),
    path('likes/toggle/t/<str:target_id>/', LikeToggleView.as_view(target_type='tweet'), name='like-tweet'),
    path('likes/videos/', LikedVideosView.as_view(), name='liked-videos'),

    # Health
    path('healthcheck/', HealthcheckView.as_view(), name='healthcheck'),

    # Auth (development)
    path('auth/mock-login/', MockAuthView.as_view(), name='mock-login'),
    path('auth/whoami/', WhoAmIView.as_view(), name='whoami'),
]
