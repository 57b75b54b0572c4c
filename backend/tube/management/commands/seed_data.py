"""
Management command to seed the database with sample data.

Usage: python manage.py seed_data

Videos point at placeholder URLs; the media host is never called.
"""

import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from tube.models import Comment, Like, Playlist, PlaylistVideo, Subscription, User, Video
from tube.services import toggle_like

PLACEHOLDER_HOST = 'https://storage.googleapis.com/vidtube-sample'


class Command(BaseCommand):
    help = 'Seed the database with sample data for testing'

    def add_arguments(self, parser):
        parser.add_argument('--users', type=int, default=10, help='Number of users to create')
        parser.add_argument('--videos', type=int, default=30, help='Number of videos to create')
        parser.add_argument('--comments', type=int, default=100, help='Number of comments to create')
        parser.add_argument('--clear', action='store_true', help='Clear existing data before seeding')

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            Like.objects.all().delete()
            PlaylistVideo.objects.all().delete()
            Playlist.objects.all().delete()
            Comment.objects.all().delete()
            Video.objects.all().delete()
            Subscription.objects.all().delete()
            User.objects.filter(is_superuser=False).delete()

        self.stdout.write('Creating users...')
        users = self._create_users(options['users'])

        self.stdout.write('Creating subscriptions...')
        self._create_subscriptions(users)

        self.stdout.write('Creating videos...')
        videos = self._create_videos(users, options['videos'])

        self.stdout.write('Creating comments...')
        comments = self._create_comments(users, videos, options['comments'])

        self.stdout.write('Creating playlists...')
        playlists = self._create_playlists(users, videos)

        self.stdout.write('Creating likes...')
        self._create_likes(users, videos, comments)

        self.stdout.write(self.style.SUCCESS(
            f'Successfully created:\n'
            f'  - {len(users)} users\n'
            f'  - {len(videos)} videos\n'
            f'  - {len(comments)} comments\n'
            f'  - {len(playlists)} playlists\n'
            f'  - Likes and subscriptions'
        ))

    def _create_users(self, count):
        users = []
        for i in range(count):
            username = f'user{i+1}'
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(
                    username=username,
                    email=f'{username}@example.com',
                    password='password123',
                    full_name=f'User {i+1}',
                    avatar=f'{PLACEHOLDER_HOST}/avatars/{username}.png',
                )
            users.append(user)
        return users

    def _create_subscriptions(self, users):
        for subscriber in users:
            channels = random.sample(users, k=min(3, len(users)))
            for channel in channels:
                if channel.id != subscriber.id:
                    Subscription.objects.get_or_create(subscriber=subscriber, channel=channel)

    def _create_videos(self, users, count):
        titles = [
            "Building a REST API from scratch",
            "Weekend hiking vlog",
            "10 tips for cleaner code",
            "Live coding session",
            "Unboxing and first impressions",
            "Tutorial: getting started",
        ]
        videos = []
        for i in range(count):
            slug = f'sample-{i+1}'
            videos.append(Video.objects.create(
                owner=random.choice(users),
                video_public_id=f'videos/{slug}.mp4',
                video_url=f'{PLACEHOLDER_HOST}/videos/{slug}.mp4',
                thumbnail_public_id=f'images/{slug}.jpg',
                thumbnail_url=f'{PLACEHOLDER_HOST}/images/{slug}.jpg',
                title=f"{random.choice(titles)} #{i+1}",
                description="Sample video generated by seed_data.",
                duration=round(random.uniform(30, 1800), 2),
                views=random.randint(0, 5000),
                is_published=random.random() > 0.1,
                created_at=timezone.now() - timedelta(hours=random.randint(0, 240)),
            ))
        return videos

    def _create_comments(self, users, videos, count):
        comment_texts = [
            "Great video!",
            "Thanks for sharing!",
            "Can you do a follow-up on this?",
            "This is exactly what I was looking for.",
            "Well explained.",
        ]
        comments = []
        for _ in range(count):
            comments.append(Comment.objects.create(
                video=random.choice(videos),
                owner=random.choice(users),
                content=random.choice(comment_texts),
                created_at=timezone.now() - timedelta(hours=random.randint(0, 48)),
            ))
        return comments

    def _create_playlists(self, users, videos):
        playlists = []
        for user in users:
            playlist = Playlist.objects.create(
                owner=user,
                name='Favorites',
                description=f'Favorite videos of {user.username}',
            )
            for video in random.sample(videos, k=min(5, len(videos))):
                PlaylistVideo.objects.create(playlist=playlist, video=video)
            playlists.append(playlist)
        return playlists

    def _create_likes(self, users, videos, comments):
        # Like about half of the videos
        for video in videos:
            for liker in random.sample(users, k=len(users) // 2):
                if liker.id != video.owner_id:
                    toggle_like(liker, 'video', video.id)

        # Like 30% of comments
        for comment in comments:
            if random.random() < 0.3:
                for liker in random.sample(users, k=min(3, len(users))):
                    toggle_like(liker, 'comment', comment.id)
