"""
Tests for VidTube

Focus areas:
1. Id validation (400 and no mutation)
2. Video publish / read / owner-only operations (media host mocked)
3. Playlist membership (no duplicates, idempotent removal)
4. Comments and likes (derived counts, viewer flags)
"""

import json
import subprocess
from datetime import timedelta
from unittest.mock import MagicMock, patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import IntegrityError, transaction
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from . import media
from .exceptions import ApiError, custom_exception_handler
from .models import Comment, Like, Playlist, PlaylistVideo, Subscription, Tweet, User, Video, WatchHistoryEntry
from .pagination import paginate, parse_page_params
from .queries import get_published_video_detail, is_valid_id
from .services import add_to_watch_history, toggle_like

API = '/api/v1'
INVALID_IDS = ['abc', '0', '-1', '12abc', '007', '\u00b2']


def make_video(owner, **kwargs):
    defaults = {
        'video_public_id': 'videos/sample.mp4',
        'video_url': 'https://cdn.example.com/videos/sample.mp4',
        'thumbnail_public_id': 'images/sample.jpg',
        'thumbnail_url': 'https://cdn.example.com/images/sample.jpg',
        'title': 'Sample video',
        'description': 'A sample video',
        'duration': 12.5,
    }
    defaults.update(kwargs)
    return Video.objects.create(owner=owner, **defaults)


def video_upload(name='clip.mp4'):
    return SimpleUploadedFile(name, b'fake-video-bytes', content_type='video/mp4')


def image_upload(name='thumb.jpg'):
    return SimpleUploadedFile(name, b'fake-image-bytes', content_type='image/jpeg')


class ApiTestCase(TestCase):
    """Authenticated client for `self.user` plus a second user."""

    def setUp(self):
        self.user = User.objects.create_user('viewer', 'viewer@test.com', 'pass', full_name='Viewer One')
        self.other = User.objects.create_user('creator', 'creator@test.com', 'pass', full_name='Creator')
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def assertEnvelopeError(self, response, message=None, status_code=400):
        self.assertEqual(response.status_code, status_code)
        body = response.json()
        self.assertEqual(body['statusCode'], status_code)
        self.assertFalse(body['success'])
        self.assertIsNone(body['data'])
        if message is not None:
            self.assertEqual(body['message'], message)


class IdValidationTestCase(ApiTestCase):
    """Malformed ids are rejected with 400 before any write."""

    def setUp(self):
        super().setUp()
        self.video = make_video(self.user)
        self.playlist = Playlist.objects.create(owner=self.user, name='Mine')
        self.comment = Comment.objects.create(video=self.video, owner=self.user, content='hello')

    def test_is_valid_id(self):
        self.assertTrue(is_valid_id('1'))
        self.assertTrue(is_valid_id(42))
        for raw in INVALID_IDS + ['', None, ' ', '1.5']:
            self.assertFalse(is_valid_id(raw), raw)

    def test_invalid_ids_return_400_without_mutation(self):
        for bad in INVALID_IDS:
            requests = [
                self.client.get(f'{API}/videos/{bad}/'),
                self.client.delete(f'{API}/videos/{bad}/'),
                self.client.patch(f'{API}/videos/toggle/publish/{bad}/'),
                self.client.patch(f'{API}/videos/{bad}/thumbnail/'),
                self.client.get(f'{API}/comments/{bad}/'),
                self.client.post(f'{API}/comments/{bad}/', {'content': 'x'}, format='json'),
                self.client.patch(f'{API}/comments/c/{bad}/', {'content': 'x'}, format='json'),
                self.client.delete(f'{API}/comments/c/{bad}/'),
                self.client.get(f'{API}/playlist/{bad}/'),
                self.client.delete(f'{API}/playlist/{bad}/'),
                self.client.patch(f'{API}/playlist/add/{bad}/{self.playlist.id}/'),
                self.client.patch(f'{API}/playlist/add/{self.video.id}/{bad}/'),
                self.client.patch(f'{API}/playlist/remove/{bad}/{self.playlist.id}/'),
                self.client.get(f'{API}/playlist/user/{bad}/'),
                self.client.post(f'{API}/likes/toggle/v/{bad}/'),
            ]
            for response in requests:
                self.assertEnvelopeError(response)

        self.video.refresh_from_db()
        self.assertEqual(self.video.views, 0)
        self.assertTrue(self.video.is_published)
        self.assertEqual(Comment.objects.count(), 1)
        self.assertEqual(Playlist.objects.count(), 1)
        self.assertEqual(PlaylistVideo.objects.count(), 0)
        self.assertEqual(Like.objects.count(), 0)

    def test_invalid_id_messages(self):
        self.assertEnvelopeError(self.client.get(f'{API}/videos/abc/'), 'Invalid Video Id')
        self.assertEnvelopeError(self.client.get(f'{API}/playlist/abc/'), 'Invalid Playlist ID')
        self.assertEnvelopeError(self.client.get(f'{API}/playlist/user/abc/'), 'Invalid User ID')
        self.assertEnvelopeError(self.client.delete(f'{API}/comments/c/abc/'), 'Invalid comment Id')
        self.assertEnvelopeError(self.client.get(f'{API}/videos/²/'), 'Invalid Video Id')


class VideoPublishTestCase(ApiTestCase):

    def _publish(self, **overrides):
        payload = {'title': 'My clip', 'description': 'First upload'}
        payload.update(overrides)
        payload = {k: v for k, v in payload.items() if v is not None}
        return self.client.post(f'{API}/videos/', payload, format='multipart')

    @patch('tube.media.get_video_duration', return_value=42.0)
    @patch('tube.media.upload_on_storage')
    def test_publish_creates_video(self, mock_upload, mock_duration):
        mock_upload.side_effect = [
            {'public_id': 'videos/abc.mp4', 'url': 'https://cdn.example.com/videos/abc.mp4'},
            {'public_id': 'images/abc.jpg', 'url': 'https://cdn.example.com/images/abc.jpg'},
        ]

        response = self._publish(videoFile=video_upload(), thumbnail=image_upload())

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['statusCode'], 200)
        self.assertTrue(body['success'])
        self.assertEqual(body['message'], 'Video published successfully')
        self.assertEqual(body['data']['video'], {'public_id': 'videos/abc.mp4', 'url': 'https://cdn.example.com/videos/abc.mp4'})
        self.assertEqual(body['data']['duration'], 42.0)
        self.assertEqual(body['data']['owner'], self.user.id)
        self.assertTrue(body['data']['isPublished'])

        mock_duration.assert_called_once_with('https://cdn.example.com/videos/abc.mp4')
        self.assertEqual(mock_upload.call_count, 2)
        self.assertEqual(Video.objects.get().title, 'My clip')

    @patch('tube.media.get_video_duration', return_value=1.0)
    @patch('tube.media.upload_on_storage')
    def test_publish_without_files_returns_400(self, mock_upload, mock_duration):
        mock_upload.return_value = None

        response = self._publish()

        self.assertEnvelopeError(response, 'Video file is required')
        self.assertEqual(Video.objects.count(), 0)
        mock_duration.assert_not_called()

    @patch('tube.media.get_video_duration', return_value=1.0)
    @patch('tube.media.upload_on_storage')
    def test_publish_without_thumbnail_returns_400(self, mock_upload, mock_duration):
        mock_upload.side_effect = [
            {'public_id': 'videos/abc.mp4', 'url': 'https://cdn.example.com/videos/abc.mp4'},
            None,
        ]

        response = self._publish(videoFile=video_upload())

        self.assertEnvelopeError(response, 'Thumbnail file is required')
        self.assertEqual(Video.objects.count(), 0)
        # The video upload already happened and is not rolled back.
        self.assertEqual(mock_upload.call_count, 2)
        self.assertIsNotNone(mock_upload.call_args_list[0].args[0])
        self.assertIsNone(mock_upload.call_args_list[1].args[0])

    @patch('tube.media.upload_on_storage')
    def test_publish_without_title_returns_400(self, mock_upload):
        response = self._publish(title=None, videoFile=video_upload(), thumbnail=image_upload())

        self.assertEnvelopeError(response, 'All fields are required')
        mock_upload.assert_not_called()
        self.assertEqual(Video.objects.count(), 0)

    @patch('tube.media.get_video_duration')
    @patch('tube.media.upload_on_storage')
    def test_duration_probe_failure(self, mock_upload, mock_duration):
        mock_upload.side_effect = [
            {'public_id': 'videos/abc.mp4', 'url': 'https://cdn.example.com/videos/abc.mp4'},
            {'public_id': 'images/abc.jpg', 'url': 'https://cdn.example.com/images/abc.jpg'},
        ]
        mock_duration.side_effect = FileNotFoundError('ffprobe')

        with self.assertLogs('tube.services', level='ERROR'):
            response = self._publish(videoFile=video_upload(), thumbnail=image_upload())

        self.assertEnvelopeError(response, 'Something went wrong while processing the video', status_code=500)
        self.assertEqual(Video.objects.count(), 0)

    @patch('tube.media.get_video_duration', side_effect=subprocess.TimeoutExpired('ffprobe', 60))
    @patch('tube.media.upload_on_storage')
    def test_duration_probe_timeout(self, mock_upload, mock_duration):
        mock_upload.side_effect = [
            {'public_id': 'videos/abc.mp4', 'url': 'https://cdn.example.com/videos/abc.mp4'},
            {'public_id': 'images/abc.jpg', 'url': 'https://cdn.example.com/images/abc.jpg'},
        ]

        with self.assertLogs('tube.services', level='ERROR'):
            response = self._publish(videoFile=video_upload(), thumbnail=image_upload())

        self.assertEqual(response.status_code, 500)
        self.assertEqual(Video.objects.count(), 0)


class VideoReadTestCase(ApiTestCase):

    def test_list_is_paginated_with_owner_summary(self):
        Subscription.objects.create(subscriber=self.user, channel=self.other)
        for i in range(3):
            make_video(self.other, title=f'Video {i}')

        response = self.client.get(f'{API}/videos/', {'page': 2, 'limit': 2})

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['totalDocs'], 3)
        self.assertEqual(data['totalPages'], 2)
        self.assertEqual(data['page'], 2)
        self.assertEqual(data['limit'], 2)
        self.assertEqual(data['pagingCounter'], 3)
        self.assertTrue(data['hasPrevPage'])
        self.assertFalse(data['hasNextPage'])
        self.assertEqual(data['prevPage'], 1)
        self.assertIsNone(data['nextPage'])
        self.assertEqual(len(data['docs']), 1)
        doc = data['docs'][0]
        self.assertEqual(doc['title'], 'Video 2')
        self.assertEqual(doc['owner']['username'], 'creator')
        self.assertEqual(doc['owner']['fullName'], 'Creator')
        self.assertEqual(doc['owner']['subscribersCount'], 1)

    def test_list_defaults_and_ignored_filters(self):
        make_video(self.other, title='Published')
        make_video(self.other, title='Draft', is_published=False)

        response = self.client.get(f'{API}/videos/', {'query': 'nothing-matches', 'sortBy': 'views', 'userId': '999'})

        data = response.json()['data']
        self.assertEqual(data['page'], 1)
        self.assertEqual(data['limit'], 10)
        self.assertEqual([d['title'] for d in data['docs']], ['Published', 'Draft'])

    def test_get_by_id_increments_views_and_returns_stats(self):
        video = make_video(self.other)
        Subscription.objects.create(subscriber=self.user, channel=self.other)
        Like.objects.create(video=video, liked_by=self.user)
        Like.objects.create(video=video, liked_by=self.other)

        response = self.client.get(f'{API}/videos/{video.id}/')

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['message'], 'Video fetched successfully')
        data = body['data']
        self.assertEqual(data['views'], 1)
        self.assertEqual(data['likesCount'], 2)
        self.assertTrue(data['isLiked'])
        self.assertEqual(data['owner']['subscribersCount'], 1)
        self.assertTrue(data['owner']['isSubscribed'])

        self.client.get(f'{API}/videos/{video.id}/')
        video.refresh_from_db()
        self.assertEqual(video.views, 2)

    def test_get_by_id_counts_view_even_when_unpublished(self):
        video = make_video(self.other, is_published=False)

        response = self.client.get(f'{API}/videos/{video.id}/')

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()['data'])
        video.refresh_from_db()
        self.assertEqual(video.views, 1)

    def test_get_missing_video_returns_null_data(self):
        response = self.client.get(f'{API}/videos/999999/')

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()['data'])
        self.assertEqual(WatchHistoryEntry.objects.count(), 0)

    def test_watch_history_has_no_duplicates(self):
        first = make_video(self.other, title='first')
        second = make_video(self.other, title='second')

        for video_id in (first.id, second.id, first.id):
            self.client.get(f'{API}/videos/{video_id}/')

        history = list(self.user.watch_entries.values_list('video_id', flat=True))
        self.assertEqual(history, [first.id, second.id])

    def test_add_to_watch_history_returns_false_when_present(self):
        video = make_video(self.other)
        self.assertTrue(add_to_watch_history(self.user, video.id))
        self.assertFalse(add_to_watch_history(self.user, video.id))

    def test_detail_query_without_viewer(self):
        video = make_video(self.other)
        Like.objects.create(video=video, liked_by=self.user)

        detail = get_published_video_detail(video.id, None)

        self.assertEqual(detail.likes_count, 1)
        self.assertFalse(detail.is_liked)
        self.assertFalse(detail.owner_is_subscribed)

    def test_requires_authentication(self):
        anonymous = APIClient()
        response = anonymous.get(f'{API}/videos/')
        self.assertIn(response.status_code, (401, 403))
        self.assertFalse(response.json()['success'])


class VideoOwnerOperationsTestCase(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.video = make_video(self.user)

    @patch('tube.media.delete_image_asset', return_value=True)
    @patch('tube.media.delete_video_asset', return_value=True)
    def test_owner_can_delete(self, mock_delete_video, mock_delete_image):
        response = self.client.delete(f'{API}/videos/{self.video.id}/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data'], {})
        mock_delete_video.assert_called_once_with('videos/sample.mp4')
        mock_delete_image.assert_called_once_with('images/sample.jpg')
        self.assertFalse(Video.objects.filter(id=self.video.id).exists())

    @patch('tube.media.delete_image_asset')
    @patch('tube.media.delete_video_asset')
    def test_non_owner_cannot_delete(self, mock_delete_video, mock_delete_image):
        video = make_video(self.other)

        response = self.client.delete(f'{API}/videos/{video.id}/')

        self.assertEnvelopeError(response, 'Video not available')
        mock_delete_video.assert_not_called()
        mock_delete_image.assert_not_called()
        self.assertTrue(Video.objects.filter(id=video.id).exists())

    @patch('tube.media.upload_on_storage')
    @patch('tube.media.delete_image_asset', return_value=True)
    def test_update_thumbnail(self, mock_delete_image, mock_upload):
        mock_upload.return_value = {'public_id': 'images/new.jpg', 'url': 'https://cdn.example.com/images/new.jpg'}

        response = self.client.patch(
            f'{API}/videos/{self.video.id}/thumbnail/',
            {'thumbnail': image_upload()},
            format='multipart'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['thumbnail']['public_id'], 'images/new.jpg')
        mock_delete_image.assert_called_once_with('images/sample.jpg')
        self.video.refresh_from_db()
        self.assertEqual(self.video.thumbnail_url, 'https://cdn.example.com/images/new.jpg')

    @patch('tube.media.upload_on_storage')
    @patch('tube.media.delete_image_asset', return_value=True)
    def test_update_thumbnail_requires_file(self, mock_delete_image, mock_upload):
        response = self.client.patch(f'{API}/videos/{self.video.id}/thumbnail/', {}, format='multipart')

        self.assertEnvelopeError(response, 'Thumbnail file is missing')
        # The old asset is already gone by the time the file is checked.
        mock_delete_image.assert_called_once_with('images/sample.jpg')
        mock_upload.assert_not_called()

    def test_toggle_publish_status(self):
        response = self.client.patch(f'{API}/videos/toggle/publish/{self.video.id}/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'success': True})
        self.video.refresh_from_db()
        self.assertFalse(self.video.is_published)

        self.client.patch(f'{API}/videos/toggle/publish/{self.video.id}/')
        self.video.refresh_from_db()
        self.assertTrue(self.video.is_published)

    def test_toggle_publish_bumps_updated_at(self):
        yesterday = timezone.now() - timedelta(days=1)
        Video.objects.filter(id=self.video.id).update(updated_at=yesterday)

        self.client.patch(f'{API}/videos/toggle/publish/{self.video.id}/')

        self.video.refresh_from_db()
        self.assertGreater(self.video.updated_at, yesterday)

    def test_toggle_publish_of_other_users_video(self):
        video = make_video(self.other)
        response = self.client.patch(f'{API}/videos/toggle/publish/{video.id}/')
        self.assertEnvelopeError(response, 'Video not available')


class CommentTestCase(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.video = make_video(self.other)

    def test_create_without_content_returns_400(self):
        for payload in ({}, {'content': ''}, {'content': '   '}):
            response = self.client.post(f'{API}/comments/{self.video.id}/', payload, format='json')
            self.assertEnvelopeError(response, 'Comment is required')
        self.assertEqual(Comment.objects.count(), 0)

    def test_create_comment(self):
        response = self.client.post(f'{API}/comments/{self.video.id}/', {'content': 'Nice one'}, format='json')

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['content'], 'Nice one')
        self.assertEqual(data['owner'], self.user.id)
        self.assertEqual(data['video'], self.video.id)

    def test_create_on_missing_video(self):
        response = self.client.post(f'{API}/comments/999999/', {'content': 'Nice one'}, format='json')
        self.assertEnvelopeError(response, 'Invalid video Id')
        self.assertEqual(Comment.objects.count(), 0)

    def test_list_comments_with_like_stats(self):
        first = Comment.objects.create(video=self.video, owner=self.other, content='first')
        Comment.objects.create(video=self.video, owner=self.user, content='second')
        Like.objects.create(comment=first, liked_by=self.user)
        Like.objects.create(comment=first, liked_by=self.other)

        response = self.client.get(f'{API}/comments/{self.video.id}/')

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['totalDocs'], 2)
        docs = data['docs']
        self.assertEqual([d['content'] for d in docs], ['first', 'second'])
        self.assertEqual(docs[0]['likesCount'], 2)
        self.assertTrue(docs[0]['isLiked'])
        self.assertEqual(docs[1]['likesCount'], 0)
        self.assertFalse(docs[1]['isLiked'])
        self.assertEqual(docs[0]['owner'], {'id': self.other.id, 'username': 'creator', 'fullName': 'Creator', 'avatar': ''})

    def test_update_comment_without_ownership_check(self):
        comment = Comment.objects.create(video=self.video, owner=self.other, content='before')

        response = self.client.patch(f'{API}/comments/c/{comment.id}/', {'content': 'after'}, format='json')

        self.assertEqual(response.status_code, 200)
        comment.refresh_from_db()
        self.assertEqual(comment.content, 'after')

    def test_update_requires_content(self):
        comment = Comment.objects.create(video=self.video, owner=self.user, content='before')
        response = self.client.patch(f'{API}/comments/c/{comment.id}/', {}, format='json')
        self.assertEnvelopeError(response, 'Content is required')

    def test_delete_comment(self):
        comment = Comment.objects.create(video=self.video, owner=self.other, content='bye')

        response = self.client.delete(f'{API}/comments/c/{comment.id}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Comment.objects.filter(id=comment.id).exists())

        response = self.client.delete(f'{API}/comments/c/{comment.id}/')
        self.assertEnvelopeError(response, 'Something went wrong while db operation')


class PlaylistTestCase(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.v1 = make_video(self.other, title='V1')
        self.v2 = make_video(self.other, title='V2')

    def _create(self, payload):
        return self.client.post(f'{API}/playlist/', payload, format='json')

    def test_favorites_end_to_end(self):
        response = self._create({'name': 'Favorites'})
        self.assertEqual(response.status_code, 200)
        playlist_id = response.json()['data']['id']

        first = self.client.patch(f'{API}/playlist/add/{self.v1.id}/{playlist_id}/')
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json()['data']['videos'], [self.v1.id])

        second = self.client.patch(f'{API}/playlist/add/{self.v1.id}/{playlist_id}/')
        self.assertEnvelopeError(second, 'Video already exist in playlist')

        listed = self.client.get(f'{API}/playlist/{playlist_id}/')
        self.assertEqual(listed.json()['data']['videos'], [self.v1.id])

    def test_videos_keep_insertion_order(self):
        playlist = Playlist.objects.create(owner=self.user, name='Queue')
        self.client.patch(f'{API}/playlist/add/{self.v2.id}/{playlist.id}/')
        self.client.patch(f'{API}/playlist/add/{self.v1.id}/{playlist.id}/')

        self.assertEqual(playlist.video_ids(), [self.v2.id, self.v1.id])

    def test_remove_absent_video_is_idempotent(self):
        playlist = Playlist.objects.create(owner=self.user, name='Queue')
        PlaylistVideo.objects.create(playlist=playlist, video=self.v1)

        response = self.client.patch(f'{API}/playlist/remove/{self.v2.id}/{playlist.id}/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['videos'], [self.v1.id])

        response = self.client.patch(f'{API}/playlist/remove/{self.v1.id}/{playlist.id}/')
        self.assertEqual(response.json()['data']['videos'], [])

    def test_add_to_missing_playlist(self):
        response = self.client.patch(f'{API}/playlist/add/{self.v1.id}/999999/')
        self.assertEnvelopeError(response)
        self.assertEqual(PlaylistVideo.objects.count(), 0)

    def test_create_without_description_but_update_requires_it(self):
        created = self._create({'name': 'No description'})
        self.assertEqual(created.status_code, 200)
        self.assertEqual(created.json()['data']['description'], '')
        playlist_id = created.json()['data']['id']

        response = self.client.patch(f'{API}/playlist/{playlist_id}/', {'name': 'Renamed'}, format='json')
        self.assertEnvelopeError(response, 'name and description field is required')
        self.assertEqual(Playlist.objects.get(id=playlist_id).name, 'No description')

        response = self.client.patch(
            f'{API}/playlist/{playlist_id}/',
            {'name': 'Renamed', 'description': 'Now described'},
            format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data'], {})
        self.assertEqual(Playlist.objects.get(id=playlist_id).name, 'Renamed')

    def test_create_requires_name(self):
        response = self._create({'description': 'nameless'})
        self.assertEnvelopeError(response, 'Name field is required')
        self.assertEqual(Playlist.objects.count(), 0)

    def test_user_playlists(self):
        empty = self.client.get(f'{API}/playlist/user/{self.other.id}/')
        self.assertEnvelopeError(empty, 'No playlist available')

        Playlist.objects.create(owner=self.other, name='One')
        Playlist.objects.create(owner=self.other, name='Two')
        response = self.client.get(f'{API}/playlist/user/{self.other.id}/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual([p['name'] for p in response.json()['data']], ['One', 'Two'])

    def test_get_and_delete_missing_playlist(self):
        self.assertEnvelopeError(self.client.get(f'{API}/playlist/999999/'), 'Invalid Playlist Id')
        self.assertEnvelopeError(self.client.delete(f'{API}/playlist/999999/'), 'Invalid Play List Id')

    def test_delete_playlist_of_another_user(self):
        playlist = Playlist.objects.create(owner=self.other, name='Theirs')

        response = self.client.delete(f'{API}/playlist/{playlist.id}/')

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Playlist.objects.filter(id=playlist.id).exists())

    def test_unique_constraint_backs_pre_check(self):
        playlist = Playlist.objects.create(owner=self.user, name='Queue')
        PlaylistVideo.objects.create(playlist=playlist, video=self.v1)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                PlaylistVideo.objects.create(playlist=playlist, video=self.v1)


class LikeTestCase(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.video = make_video(self.other)
        self.comment = Comment.objects.create(video=self.video, owner=self.other, content='c')
        self.tweet = Tweet.objects.create(owner=self.other, content='t')

    def test_toggle_video_like(self):
        response = self.client.post(f'{API}/likes/toggle/v/{self.video.id}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data'], {'isLiked': True})
        self.assertEqual(Like.objects.filter(video=self.video).count(), 1)

        response = self.client.post(f'{API}/likes/toggle/v/{self.video.id}/')
        self.assertEqual(response.json()['data'], {'isLiked': False})
        self.assertEqual(Like.objects.filter(video=self.video).count(), 0)

    def test_toggle_comment_and_tweet_likes(self):
        self.client.post(f'{API}/likes/toggle/c/{self.comment.id}/')
        self.client.post(f'{API}/likes/toggle/t/{self.tweet.id}/')

        self.assertTrue(Like.objects.filter(comment=self.comment, liked_by=self.user).exists())
        self.assertTrue(Like.objects.filter(tweet=self.tweet, liked_by=self.user).exists())
        self.assertEqual(Like.objects.get(tweet=self.tweet).target_kind, 'tweet')

    def test_toggle_missing_target(self):
        response = self.client.post(f'{API}/likes/toggle/c/999999/')
        self.assertEnvelopeError(response, 'Invalid comment Id')

    def test_toggle_like_service_rejects_unknown_type(self):
        with self.assertRaises(ValueError):
            toggle_like(self.user, 'playlist', self.video.id)

    def test_liked_videos(self):
        older = make_video(self.other, title='older')
        toggle_like(self.user, 'video', older.id)
        toggle_like(self.user, 'video', self.video.id)
        toggle_like(self.other, 'video', self.video.id)

        response = self.client.get(f'{API}/likes/videos/')

        self.assertEqual(response.status_code, 200)
        titles = [v['title'] for v in response.json()['data']]
        self.assertEqual(sorted(titles), ['Sample video', 'older'])

    def test_like_must_have_exactly_one_target(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Like.objects.create(video=self.video, comment=self.comment, liked_by=self.user)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Like.objects.create(liked_by=self.user)

    def test_duplicate_like_rejected_by_database(self):
        Like.objects.create(video=self.video, liked_by=self.user)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Like.objects.create(video=self.video, liked_by=self.user)

    def test_deleting_comment_removes_its_likes(self):
        Like.objects.create(comment=self.comment, liked_by=self.user)
        self.client.delete(f'{API}/comments/c/{self.comment.id}/')
        self.assertEqual(Like.objects.filter(comment_id=self.comment.id).count(), 0)


class MiscEndpointsTestCase(ApiTestCase):

    def test_healthcheck_is_public(self):
        response = APIClient().get(f'{API}/healthcheck/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data'], {'status': 'ok'})

    def test_whoami(self):
        response = self.client.get(f'{API}/auth/whoami/')
        self.assertEqual(response.json()['data']['username'], 'viewer')

    @override_settings(DEBUG=True)
    def test_mock_login_in_debug(self):
        anonymous = APIClient()

        response = anonymous.post(f'{API}/auth/mock-login/', {'username': 'newcomer'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['username'], 'newcomer')
        self.assertTrue(response.json()['data']['created'])
        whoami = anonymous.get(f'{API}/auth/whoami/').json()['data']
        self.assertTrue(whoami['authenticated'])
        self.assertEqual(whoami['username'], 'newcomer')

    @override_settings(DEBUG=False)
    def test_mock_login_disabled_outside_debug(self):
        anonymous = APIClient()

        response = anonymous.post(f'{API}/auth/mock-login/', {'username': 'creator'}, format='json')

        self.assertEnvelopeError(response, 'Not found', status_code=404)
        whoami = anonymous.get(f'{API}/auth/whoami/').json()['data']
        self.assertFalse(whoami['authenticated'])
        self.assertEqual(User.objects.count(), 2)


class PaginationTestCase(TestCase):

    def test_parse_page_params(self):
        self.assertEqual(parse_page_params({}), (1, 10))
        self.assertEqual(parse_page_params({'page': '3', 'limit': '5'}), (3, 5))
        self.assertEqual(parse_page_params({'page': 'x', 'limit': '-2'}), (1, 10))
        self.assertEqual(parse_page_params({'limit': '100000'}), (1, 100))

    def test_page_past_the_end_is_empty(self):
        owner = User.objects.create_user('owner', 'o@test.com', 'pass')
        make_video(owner)

        data = paginate(Video.objects.order_by('id'), 5, 10, lambda rows: [r.id for r in rows])

        self.assertEqual(data['docs'], [])
        self.assertEqual(data['totalDocs'], 1)
        self.assertEqual(data['totalPages'], 1)
        self.assertFalse(data['hasNextPage'])

    def test_empty_queryset(self):
        data = paginate(Video.objects.order_by('id'), 1, 10, list)
        self.assertEqual(data['totalDocs'], 0)
        self.assertEqual(data['totalPages'], 0)
        self.assertFalse(data['hasPrevPage'])
        self.assertIsNone(data['nextPage'])


class ExceptionHandlerTestCase(SimpleTestCase):

    def test_api_error_envelope(self):
        response = custom_exception_handler(ApiError(404, 'Nope', ['detail']), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {
            'statusCode': 404,
            'data': None,
            'message': 'Nope',
            'success': False,
            'errors': ['detail'],
        })

    def test_value_error_is_400(self):
        response = custom_exception_handler(ValueError('bad input'), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'bad input')

    def test_unexpected_error_is_500(self):
        with self.assertLogs('tube.exceptions', level='ERROR'):
            response = custom_exception_handler(RuntimeError('boom'), {})
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.data['success'])


@override_settings(GCS_BUCKET='test-bucket', MEDIA_PUBLIC_BASE_URL='')
class MediaHostTestCase(SimpleTestCase):

    def setUp(self):
        self.client_patcher = patch('tube.media.get_storage_client')
        self.storage_client = self.client_patcher.start().return_value
        self.blob = MagicMock()
        self.blob.public_url = 'https://storage.googleapis.com/test-bucket/videos/x.mp4'
        self.storage_client.bucket.return_value.blob.return_value = self.blob

    def tearDown(self):
        self.client_patcher.stop()

    def test_upload_returns_public_id_and_url(self):
        result = media.upload_on_storage('/tmp/upload/clip.MP4')

        self.assertTrue(result['public_id'].startswith('videos/'))
        self.assertTrue(result['public_id'].endswith('.mp4'))
        self.assertEqual(result['url'], self.blob.public_url)
        self.storage_client.bucket.assert_called_with('test-bucket')
        self.blob.upload_from_filename.assert_called_once()

    def test_images_go_to_image_folder(self):
        result = media.upload_on_storage('/tmp/upload/thumb.png')
        self.assertTrue(result['public_id'].startswith('images/'))

    @override_settings(MEDIA_PUBLIC_BASE_URL='https://cdn.example.com/')
    def test_public_base_url(self):
        result = media.upload_on_storage('/tmp/upload/thumb.png')
        self.assertEqual(result['url'], f"https://cdn.example.com/{result['public_id']}")

    def test_upload_failure_returns_none(self):
        self.blob.upload_from_filename.side_effect = OSError('network down')
        with self.assertLogs('tube.media', level='ERROR'):
            self.assertIsNone(media.upload_on_storage('/tmp/upload/clip.mp4'))

    def test_upload_without_path_returns_none(self):
        self.assertIsNone(media.upload_on_storage(None))
        self.blob.upload_from_filename.assert_not_called()

    def test_delete_assets(self):
        self.assertTrue(media.delete_video_asset('videos/x.mp4'))
        self.assertTrue(media.delete_image_asset('images/x.jpg'))
        self.assertEqual(self.blob.delete.call_count, 2)

    def test_delete_failure_and_empty_id(self):
        self.blob.delete.side_effect = RuntimeError('gone')
        with self.assertLogs('tube.media', level='ERROR'):
            self.assertFalse(media.delete_video_asset('videos/x.mp4'))
        self.assertFalse(media.delete_image_asset(''))

    def test_parse_duration(self):
        self.assertEqual(media.parse_duration(json.dumps({'format': {'duration': '12.345'}})), 12.345)
        self.assertEqual(media.parse_duration('{}'), 0.0)
        self.assertEqual(media.parse_duration(json.dumps({'format': {'duration': 'N/A'}})), 0.0)

    @patch('tube.media.subprocess.run')
    def test_get_video_duration(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=0, stdout='{"format": {"duration": "61.5"}}', stderr=''
        )

        self.assertEqual(media.get_video_duration('https://cdn.example.com/v.mp4'), 61.5)
        command = mock_run.call_args.args[0]
        self.assertEqual(command[0], 'ffprobe')
        self.assertEqual(command[-1], 'https://cdn.example.com/v.mp4')

    @patch('tube.media.subprocess.run')
    def test_get_video_duration_failure(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=1, stdout='', stderr='bad url')
        with self.assertRaises(RuntimeError):
            media.get_video_duration('https://cdn.example.com/missing.mp4')
