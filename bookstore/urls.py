"""
URL configuration for bookstore project.
"""
from django.contrib import admin
from django.urls import include, path

from store.api.views import graphql_view

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('store.api.urls')),
    path('graphql/', graphql_view, name='graphql'),
]
