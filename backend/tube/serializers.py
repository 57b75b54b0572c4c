"""
DRF Serializers
===============

Serializers handle:
1. Validation of incoming bodies (with the exact 400 messages clients rely on)
2. Shaping rows into camelCase JSON

DESIGN DECISIONS:
-----------------
1. Separate serializers for raw records vs enriched list/detail reads
2. Derived fields (likesCount, isLiked, subscribersCount, isSubscribed) are
   read from queryset annotations in queries.py, never computed here
"""

from rest_framework import serializers

from .models import Comment, Playlist, User, Video


def _required(message: str, **kwargs) -> serializers.CharField:
    """CharField whose missing, null and blank errors all read `message`."""
    return serializers.CharField(
        error_messages={'required': message, 'blank': message, 'null': message},
        **kwargs
    )


# ============================================================================
# INPUT
# ============================================================================

class VideoPublishSerializer(serializers.Serializer):
    title = _required('All fields are required', max_length=300)
    description = _required('All fields are required')


class CommentCreateSerializer(serializers.Serializer):
    content = _required('Comment is required')


class CommentUpdateSerializer(serializers.Serializer):
    content = _required('Content is required')


class PlaylistCreateSerializer(serializers.Serializer):
    name = _required('Name field is required', max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')


class PlaylistUpdateSerializer(serializers.Serializer):
    name = _required('name and description field is required', max_length=200)
    description = _required('name and description field is required')


# ============================================================================
# OUTPUT
# ============================================================================

class OwnerSerializer(serializers.ModelSerializer):
    """Projection of a user embedded in other objects."""
    fullName = serializers.CharField(source='full_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'fullName', 'avatar']
        read_only_fields = fields


class VideoSerializer(serializers.ModelSerializer):
    """A video record as stored."""
    video = serializers.SerializerMethodField()
    thumbnail = serializers.SerializerMethodField()
    isPublished = serializers.BooleanField(source='is_published', read_only=True)
    owner = serializers.PrimaryKeyRelatedField(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Video
        fields = [
            'id',
            'video',
            'thumbnail',
            'title',
            'description',
            'duration',
            'views',
            'isPublished',
            'owner',
            'createdAt',
            'updatedAt',
        ]
        read_only_fields = fields

    def get_video(self, obj):
        return {'public_id': obj.video_public_id, 'url': obj.video_url}

    def get_thumbnail(self, obj):
        return {'public_id': obj.thumbnail_public_id, 'url': obj.thumbnail_url}


class VideoListSerializer(VideoSerializer):
    """
    Video joined with its owner summary.

    Expects the owner_subscribers_count annotation.
    """
    owner = serializers.SerializerMethodField()

    def get_owner(self, obj):
        data = OwnerSerializer(obj.owner).data
        data['subscribersCount'] = getattr(obj, 'owner_subscribers_count', 0)
        return data


class VideoDetailSerializer(VideoListSerializer):
    """
    Single video read with viewer-specific fields.

    Expects the annotations of queries.get_published_video_detail().
    """
    likesCount = serializers.IntegerField(source='likes_count', read_only=True)
    isLiked = serializers.BooleanField(source='is_liked', read_only=True)

    class Meta(VideoListSerializer.Meta):
        fields = [
            'id',
            'video',
            'thumbnail',
            'title',
            'description',
            'duration',
            'views',
            'owner',
            'createdAt',
            'updatedAt',
            'likesCount',
            'isLiked',
        ]
        read_only_fields = fields

    def get_owner(self, obj):
        data = super().get_owner(obj)
        data['isSubscribed'] = bool(getattr(obj, 'owner_is_subscribed', False))
        return data


class CommentSerializer(serializers.ModelSerializer):
    """A comment record as stored."""
    video = serializers.PrimaryKeyRelatedField(read_only=True)
    owner = serializers.PrimaryKeyRelatedField(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'content', 'video', 'owner', 'createdAt', 'updatedAt']
        read_only_fields = fields


class CommentListSerializer(serializers.ModelSerializer):
    """Comment with owner projection and like stats for the viewer."""
    owner = OwnerSerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    likesCount = serializers.IntegerField(source='likes_count', read_only=True)
    isLiked = serializers.BooleanField(source='is_liked', read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'content', 'owner', 'createdAt', 'updatedAt', 'likesCount', 'isLiked']
        read_only_fields = fields


class PlaylistSerializer(serializers.ModelSerializer):
    owner = serializers.PrimaryKeyRelatedField(read_only=True)
    videos = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Playlist
        fields = ['id', 'name', 'description', 'owner', 'videos', 'createdAt', 'updatedAt']
        read_only_fields = fields

    def get_videos(self, obj):
        """Video ids in the order they were added."""
        return obj.video_ids()
