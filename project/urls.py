"""
URL configuration for project project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('api/marketplace/', include(('marketplace.urls', 'marketplace'), namespace='marketplace')),
    path('api/auth/', include('rest_framework.urls')),
    path('admin/', admin.site.urls),
]

# Serve uploaded photos from MEDIA_ROOT at MEDIA_URL in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
