"""
Integration tests for the content admin API.

The tests use Django REST Framework's APIClient within the APITestCase
base class, authenticated as a staff user unless stated otherwise.
"""
import shutil
import tempfile
from io import BytesIO
from unittest import mock

import PIL.Image
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from cms.errors import SchemaFieldMissing
from cms.models import AppointmentRequest, AuditEvent, Professional, Service, SiteSettings
from cms.services.ordering import MoveLock
from cms.services.store import OrderedStore

User = get_user_model()


def image_bytes(fmt='PNG', size=(4, 4), colour='white'):
    f = BytesIO()
    PIL.Image.new('RGB', size, colour).save(f, fmt)
    return f.getvalue()


PNG = image_bytes('PNG')
JPEG = image_bytes('JPEG')


class ContentAdminAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.staff = User.objects.create_user(username='editor', password='P@ssw0rd1', is_staff=True)
        self.client.force_authenticate(self.staff)

    def seed(self):
        self.a = Professional.objects.create(name='Ana', order=1)
        self.b = Professional.objects.create(name='Bruno', order=2)
        self.c = Professional.objects.create(name='Carla', order=3)

    def test_admin_routes_require_staff(self):
        anonymous = APIClient()
        r = anonymous.get('/api/admin/professionals')
        self.assertIn(r.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

        member = User.objects.create_user(username='visitor', password='P@ssw0rd1')
        client = APIClient()
        client.force_authenticate(member)
        r = client.post('/api/admin/professionals/move', {'index': 1, 'direction': 'up'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(r.data['ok'])

    def test_create_appends_to_the_end(self):
        r1 = self.client.post('/api/admin/professionals', {'name': 'Ana', 'specialty': 'Psiquiatria'}, format='json')
        r2 = self.client.post('/api/admin/professionals', {'name': 'Bruno', 'order': 99}, format='json')
        self.assertEqual(r1.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r1.data['data']['order'], 1)
        # order is not writable through the API
        self.assertEqual(r2.data['data']['order'], 2)
        self.assertEqual(AuditEvent.objects.filter(action='create', object_type='professionals').count(), 2)

    def test_create_folds_legacy_picture_keys(self):
        r = self.client.post(
            '/api/admin/professionals',
            {'name': 'Ana', 'photo_url': 'https://cdn.example.org/ana.jpg'},
            format='json',
        )
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['data']['image_url'], 'https://cdn.example.org/ana.jpg')
        r = self.client.post('/api/admin/testimonials', {'name': 'Rita', 'text': 'Excelente', 'foto': '/media/r.png'}, format='json')
        self.assertEqual(r.data['data']['image_url'], '/media/r.png')

    def test_create_strips_markup(self):
        r = self.client.post('/api/admin/faqs', {'question': '<b>Horário?</b>', 'answer': '<script>x</script>Sempre'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['data']['question'], 'Horário?')
        self.assertNotIn('<script>', r.data['data']['answer'])

    def test_create_validates_fields(self):
        r = self.client.post('/api/admin/testimonials', {'name': 'Rita', 'text': 'Bom', 'rating': 9}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'invalid')
        self.assertIn('rating', r.data['error']['message'])

    def test_list_is_sorted_with_unordered_last(self):
        Professional.objects.create(name='Zé')
        self.seed()
        r = self.client.get('/api/admin/professionals')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual([p['name'] for p in r.data['data']], ['Ana', 'Bruno', 'Carla', 'Zé'])

    def test_update_keeps_order(self):
        self.seed()
        r = self.client.patch(f'/api/admin/professionals/{self.b.pk}', {'title': 'Dr.', 'order': 50}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.b.refresh_from_db()
        self.assertEqual(self.b.title, 'Dr.')
        self.assertEqual(self.b.order, 2)

    def test_delete(self):
        self.seed()
        r = self.client.delete(f'/api/admin/professionals/{self.a.pk}')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(Professional.objects.filter(pk=self.a.pk).exists())
        r = self.client.get(f'/api/admin/professionals/{self.a.pk}')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data['error']['code'], 'record_not_found')

    def test_unknown_list(self):
        r = self.client.get('/api/admin/doctors')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_move_up_returns_refreshed_list(self):
        self.seed()
        r = self.client.post('/api/admin/professionals/move', {'index': 1, 'direction': 'up'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual([p['name'] for p in r.data['data']], ['Bruno', 'Ana', 'Carla'])
        self.assertEqual(r.data['moved'], self.b.pk)
        self.assertEqual(r.data['swappedWith'], self.a.pk)
        event = AuditEvent.objects.get(action='move')
        self.assertEqual(event.actor, 'editor')
        self.assertEqual(event.object_id, self.b.pk)

    def test_move_with_displayed_ids(self):
        self.seed()
        ids = [self.a.pk, self.b.pk, self.c.pk]
        r = self.client.post('/api/admin/professionals/move', {'index': 0, 'direction': 'down', 'ids': ids}, format='json')
        self.assertEqual([p['name'] for p in r.data['data']], ['Bruno', 'Ana', 'Carla'])

    def test_move_guards(self):
        self.seed()
        r = self.client.post('/api/admin/professionals/move', {'index': 0, 'direction': 'up'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'move_rejected')
        r = self.client.post('/api/admin/professionals/move', {'index': 2, 'direction': 'down'}, format='json')
        self.assertEqual(r.data['error']['code'], 'move_rejected')
        r = self.client.post('/api/admin/professionals/move', {'index': 1, 'direction': 'sideways'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'invalid')

    def test_move_while_record_is_moving(self):
        self.seed()
        cache.add(MoveLock.key('cms_professional', self.b.pk), 1, 30)
        r = self.client.post('/api/admin/professionals/move', {'index': 1, 'direction': 'up'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data['error']['code'], 'move_in_progress')

    def test_move_without_order_column_returns_setup_steps(self):
        self.seed()
        missing = SchemaFieldMissing('cms_professional')
        with mock.patch.object(OrderedStore, 'write_order', side_effect=missing):
            r = self.client.post('/api/admin/professionals/move', {'index': 1, 'direction': 'up'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data['ok'], False)
        self.assertEqual(r.data['error']['code'], 'schema_field_missing')
        self.assertIn('setup', r.data['error'])
        self.assertIn('cms_professional', r.data['error']['setup'])
        self.assertEqual(
            list(Professional.objects.order_by('name').values_list('order', flat=True)), [1, 2, 3]
        )
        self.assertFalse(MoveLock().is_held('cms_professional', self.b.pk))

    def test_move_rejects_repeated_ids(self):
        self.seed()
        ids = [self.a.pk, self.a.pk]
        r = self.client.post('/api/admin/professionals/move', {'index': 1, 'direction': 'up', 'ids': ids}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'move_rejected')
        self.assertEqual(Professional.objects.get(pk=self.a.pk).order, 1)

    def test_normalize_endpoint(self):
        for title in ('Psiquiatria', 'Nutrição', 'Terapia da Fala'):
            self.client.post('/api/admin/services', {'title': title}, format='json')
        Service.objects.update(order=None)
        r = self.client.post('/api/admin/services/normalize')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['changed'], 3)
        self.assertEqual([s['title'] for s in r.data['data']], ['Nutrição', 'Psiquiatria', 'Terapia da Fala'])
        self.assertEqual([s['order'] for s in r.data['data']], [1, 2, 3])


class UploadAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.media = tempfile.mkdtemp()
        self.settings_override = override_settings(MEDIA_ROOT=self.media, MEDIA_URL='/media/')
        self.settings_override.enable()
        self.staff = User.objects.create_user(username='editor', password='P@ssw0rd1', is_staff=True)
        self.client.force_authenticate(self.staff)
        self.pro = Professional.objects.create(name='Ana', order=1)

    def tearDown(self) -> None:
        self.settings_override.disable()
        shutil.rmtree(self.media, ignore_errors=True)

    def test_image_upload_sets_image_url(self):
        upload = SimpleUploadedFile('retrato.png', PNG, content_type='image/png')
        r = self.client.post(f'/api/admin/professionals/{self.pro.pk}/image', {'photo': upload}, format='multipart')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data['url'].startswith(f'/media/professionals/{self.pro.pk}/'))
        self.assertTrue(r.data['url'].endswith('.png'))
        self.pro.refresh_from_db()
        self.assertEqual(self.pro.image_url, r.data['url'])

    def test_upload_rejects_other_types(self):
        upload = SimpleUploadedFile('cv.txt', b'hello', content_type='text/plain')
        r = self.client.post(f'/api/admin/professionals/{self.pro.pk}/image', {'file': upload}, format='multipart')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'upload_rejected')

    def test_upload_rejects_markup_named_as_html(self):
        upload = SimpleUploadedFile('x.html', b'<script>alert(1)</script>', content_type='image/png')
        r = self.client.post(f'/api/admin/professionals/{self.pro.pk}/image', {'file': upload}, format='multipart')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'upload_rejected')
        self.pro.refresh_from_db()
        self.assertEqual(self.pro.image_url, '')

    def test_upload_rejects_image_bytes_with_html_name(self):
        upload = SimpleUploadedFile('x.html', PNG, content_type='image/png')
        r = self.client.post(f'/api/admin/professionals/{self.pro.pk}/image', {'file': upload}, format='multipart')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_rejects_non_image_bytes_with_image_name(self):
        upload = SimpleUploadedFile('retrato.png', b'<svg onload="alert(1)"/>', content_type='image/png')
        r = self.client.post(f'/api/admin/professionals/{self.pro.pk}/image', {'file': upload}, format='multipart')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_extension_follows_detected_format(self):
        upload = SimpleUploadedFile('retrato.png', JPEG, content_type='image/png')
        r = self.client.post(f'/api/admin/professionals/{self.pro.pk}/image', {'file': upload}, format='multipart')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data['url'].endswith('.jpg'))

    def test_upload_rejects_large_files(self):
        upload = SimpleUploadedFile('big.png', PNG, content_type='image/png')
        with override_settings(UPLOAD_MAX_MB=0):
            r = self.client.post(f'/api/admin/professionals/{self.pro.pk}/image', {'image': upload}, format='multipart')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_without_file(self):
        r = self.client.post(f'/api/admin/professionals/{self.pro.pk}/image', {}, format='multipart')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_for_missing_record(self):
        upload = SimpleUploadedFile('retrato.png', PNG, content_type='image/png')
        r = self.client.post(f'/api/admin/professionals/{"0" * 32}/image', {'photo': upload}, format='multipart')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_logo_upload_replaces_previous_logo(self):
        first = self.client.post('/api/admin/site/logo', {'file': SimpleUploadedFile('a.png', PNG, content_type='image/png')}, format='multipart')
        second = self.client.post('/api/admin/site/logo', {'file': SimpleUploadedFile('b.png', PNG, content_type='image/png')}, format='multipart')
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data['url'], '/media/logos/logo.png')
        self.assertEqual(SiteSettings.load().logo_url, '/media/logos/logo.png')


class SiteAndAppointmentAdminTests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.staff = User.objects.create_user(username='editor', password='P@ssw0rd1', is_staff=True)
        self.client.force_authenticate(self.staff)

    def test_site_settings_update(self):
        r = self.client.put('/api/admin/site', {'hero_title': 'Bem-vindo', 'contact_phone': '+351 210 000 000'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['data']['hero_title'], 'Bem-vindo')
        r = self.client.get('/api/admin/site')
        self.assertEqual(r.data['data']['contact_phone'], '+351 210 000 000')

    def test_appointment_list_and_status(self):
        first = AppointmentRequest.objects.create(name='Ana', email='ana@example.org', phone='910000000', consultation_type='psiquiatria')
        AppointmentRequest.objects.create(name='Rui', email='rui@example.org', phone='910000001', consultation_type='nutricao')
        r = self.client.post(f'/api/admin/appointments/{first.pk}/status', {'status': 'contacted'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['data']['status'], 'contacted')
        r = self.client.get('/api/admin/appointments?status=new')
        self.assertEqual([a['name'] for a in r.data['data']], ['Rui'])
        r = self.client.post(f'/api/admin/appointments/{first.pk}/status', {'status': 'lost'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        r = self.client.post('/api/admin/appointments/999/status', {'status': 'closed'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
