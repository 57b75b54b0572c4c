"""
VidTube URL Configuration
"""
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def api_root(request):
    """Root endpoint with API information."""
    return JsonResponse({
        'message': 'VidTube API Server',
        'version': '1.0',
        'endpoints': {
            'videos': '/api/v1/videos/',
            'comments': '/api/v1/comments/<videoId>/',
            'playlists': '/api/v1/playlist/',
            'likes': '/api/v1/likes/',
            'healthcheck': '/api/v1/healthcheck/',
            'auth': '/api/v1/auth/',
        },
        'admin': '/admin/',
    })


urlpatterns = [
    path('', api_root, name='api-root'),
    path('admin/', admin.site.urls),
    path('api/v1/', include('tube.urls')),
]
