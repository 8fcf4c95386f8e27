"""
URL mappings for the clinic content API.

Trailing slashes are omitted to match the front-end.  Fixed admin paths
(``site``, ``appointments``) and the ``move``/``normalize`` actions are
listed before the generic ``<kind>`` and ``<kind>/<pk>`` routes so they
win the match.
"""
from django.urls import include, path

from .views import health
from .views.admin_content import content_detail, content_image, content_list, content_move, content_normalize
from .views.appointments import appointment_status, create_appointment, list_appointments
from .views.blog import blog_post_detail, blog_posts
from .views.blog_sync import sync_webhook
from .views.public import home, section
from .views.site import site_logo, site_settings

urlpatterns = [
    path('healthz', health.healthz, name='healthz'),
    path('', include('django_prometheus.urls')),

    # Public site
    path('api/public/home', home, name='public_home'),
    path('api/public/<slug:kind>', section, name='public_section'),
    path('api/blog/posts', blog_posts, name='blog_posts'),
    path('api/blog/posts/<str:slug>', blog_post_detail, name='blog_post_detail'),
    path('api/blog/sync', sync_webhook, name='blog_sync'),
    path('api/appointments', create_appointment, name='create_appointment'),

    # Admin
    path('api/admin/site', site_settings, name='site_settings'),
    path('api/admin/site/logo', site_logo, name='site_logo'),
    path('api/admin/appointments', list_appointments, name='list_appointments'),
    path('api/admin/appointments/<int:pk>/status', appointment_status, name='appointment_status'),
    path('api/admin/<slug:kind>/move', content_move, name='content_move'),
    path('api/admin/<slug:kind>/normalize', content_normalize, name='content_normalize'),
    path('api/admin/<slug:kind>', content_list, name='content_list'),
    path('api/admin/<slug:kind>/<str:pk>', content_detail, name='content_detail'),
    path('api/admin/<slug:kind>/<str:pk>/image', content_image, name='content_image'),
]
