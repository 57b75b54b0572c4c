"""
Django Admin Configuration for Tube Models
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    Comment,
    Like,
    Playlist,
    PlaylistVideo,
    Subscription,
    Tweet,
    User,
    Video,
    WatchHistoryEntry,
)


class WatchHistoryInline(admin.TabularInline):
    model = WatchHistoryEntry
    extra = 0
    raw_id_fields = ['video']


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Channel', {'fields': ('full_name', 'avatar')}),
    )
    list_display = ['username', 'email', 'full_name', 'is_staff']
    inlines = [WatchHistoryInline]


@admin.register(Video)
class VideoAdmin(admin.ModelAdmin):
    list_display = ['title', 'owner', 'views', 'duration', 'is_published', 'created_at']
    list_filter = ['is_published', 'created_at']
    search_fields = ['title', 'description', 'owner__username']
    readonly_fields = ['views', 'duration', 'created_at', 'updated_at']


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ['id', 'video', 'owner', 'created_at']
    list_filter = ['created_at']
    search_fields = ['content', 'owner__username']


class PlaylistVideoInline(admin.TabularInline):
    model = PlaylistVideo
    extra = 0
    raw_id_fields = ['video']


@admin.register(Playlist)
class PlaylistAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'created_at']
    search_fields = ['name', 'owner__username']
    inlines = [PlaylistVideoInline]


@admin.register(Like)
class LikeAdmin(admin.ModelAdmin):
    list_display = ['liked_by', 'video', 'comment', 'tweet', 'created_at']
    list_filter = ['created_at']
    search_fields = ['liked_by__username']


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ['subscriber', 'channel', 'created_at']
    search_fields = ['subscriber__username', 'channel__username']


@admin.register(Tweet)
class TweetAdmin(admin.ModelAdmin):
    list_display = ['id', 'owner', 'created_at']
    search_fields = ['content', 'owner__username']
