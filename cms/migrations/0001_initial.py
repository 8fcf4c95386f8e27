import cms.models
import django.core.validators
from django.db import migrations, models


def _ordered_fields():
    return [
        ('id', models.CharField(default=cms.models._new_id, editable=False, max_length=32, primary_key=True, serialize=False)),
        ('order', models.BigIntegerField(blank=True, db_index=True, null=True)),
        ('image_url', models.CharField(blank=True, default='', max_length=1024)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Professional',
            fields=_ordered_fields() + [
                ('name', models.CharField(max_length=255)),
                ('title', models.CharField(blank=True, max_length=255)),
                ('specialty', models.CharField(blank=True, max_length=255)),
                ('cv', models.TextField(blank=True)),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='Service',
            fields=_ordered_fields() + [
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('icon', models.CharField(blank=True, help_text='Icon name used by the front-end', max_length=64)),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='Testimonial',
            fields=_ordered_fields() + [
                ('name', models.CharField(max_length=255)),
                ('role', models.CharField(blank=True, help_text="e.g. 'Paciente'", max_length=255)),
                ('text', models.TextField()),
                ('rating', models.PositiveSmallIntegerField(default=5, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='AboutFeature',
            fields=_ordered_fields() + [
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('icon', models.CharField(blank=True, max_length=64)),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='Faq',
            fields=_ordered_fields() + [
                ('question', models.CharField(max_length=500)),
                ('answer', models.TextField()),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='Insurer',
            fields=_ordered_fields() + [
                ('name', models.CharField(max_length=255)),
                ('website', models.URLField(blank=True, default='', max_length=512)),
            ],
            options={'abstract': False},
        ),
        migrations.CreateModel(
            name='SiteSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('hero_title', models.CharField(blank=True, max_length=255)),
                ('hero_subtitle', models.TextField(blank=True)),
                ('hero_cta_label', models.CharField(blank=True, max_length=100)),
                ('contact_phone', models.CharField(blank=True, max_length=50)),
                ('contact_email', models.EmailField(blank=True, max_length=254)),
                ('address', models.CharField(blank=True, max_length=500)),
                ('logo_url', models.CharField(blank=True, default='', max_length=1024)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={'verbose_name_plural': 'site settings'},
        ),
        migrations.CreateModel(
            name='BlogPost',
            fields=[
                ('id', models.CharField(default=cms.models._new_id, editable=False, max_length=32, primary_key=True, serialize=False)),
                ('wordpress_id', models.PositiveBigIntegerField(blank=True, null=True, unique=True)),
                ('wordpress_url', models.URLField(blank=True, default='', max_length=1024)),
                ('title', models.CharField(max_length=500)),
                ('slug', models.SlugField(max_length=255, unique=True)),
                ('excerpt', models.TextField(blank=True, null=True)),
                ('content', models.TextField(blank=True, default='')),
                ('featured_image_url', models.URLField(blank=True, max_length=1024, null=True)),
                ('author_name', models.CharField(blank=True, max_length=255, null=True)),
                ('author_email', models.CharField(blank=True, max_length=255, null=True)),
                ('published', models.BooleanField(db_index=True, default=False)),
                ('published_at', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('categories', models.JSONField(blank=True, default=list)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('primary_category', models.CharField(blank=True, max_length=255, null=True)),
                ('primary_category_slug', models.CharField(blank=True, max_length=255, null=True)),
                ('views', models.PositiveIntegerField(default=0)),
                ('meta_title', models.CharField(blank=True, max_length=500, null=True)),
                ('meta_description', models.TextField(blank=True, null=True)),
                ('meta_keywords', models.CharField(blank=True, max_length=500, null=True)),
                ('secondary_keywords', models.CharField(blank=True, max_length=500, null=True)),
                ('tertiary_keywords', models.CharField(blank=True, max_length=500, null=True)),
                ('canonical_url', models.URLField(blank=True, max_length=1024, null=True)),
                ('robots_meta', models.CharField(blank=True, max_length=255, null=True)),
                ('advanced_robots_meta', models.CharField(blank=True, max_length=255, null=True)),
                ('og_title', models.CharField(blank=True, max_length=500, null=True)),
                ('og_description', models.TextField(blank=True, null=True)),
                ('og_image_url', models.URLField(blank=True, max_length=1024, null=True)),
                ('twitter_title', models.CharField(blank=True, max_length=500, null=True)),
                ('twitter_description', models.TextField(blank=True, null=True)),
                ('twitter_image_url', models.URLField(blank=True, max_length=1024, null=True)),
                ('twitter_card_type', models.CharField(default='summary_large_image', max_length=64)),
                ('schema_type', models.CharField(blank=True, max_length=64, null=True)),
                ('schema_markup', models.JSONField(blank=True, default=dict)),
                ('rich_snippet_type', models.CharField(blank=True, max_length=64, null=True)),
                ('article_schema_type', models.CharField(blank=True, max_length=64, null=True)),
                ('seo_score', models.CharField(blank=True, max_length=16, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'indexes': [models.Index(fields=['published', 'published_at'], name='cms_blogpost_published_idx')],
            },
        ),
        migrations.CreateModel(
            name='AppointmentRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(max_length=50)),
                ('consultation_type', models.CharField(max_length=255)),
                ('preferred_date', models.DateField(blank=True, null=True)),
                ('preferred_time', models.CharField(blank=True, max_length=32)),
                ('message', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('new', 'new'), ('contacted', 'contacted'), ('scheduled', 'scheduled'), ('closed', 'closed')], db_index=True, default='new', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name='AuditEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('actor', models.CharField(blank=True, default='', max_length=150)),
                ('action', models.CharField(max_length=64)),
                ('object_type', models.CharField(blank=True, max_length=64, null=True)),
                ('object_id', models.CharField(blank=True, max_length=64, null=True)),
                ('detail', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['action', 'created_at'], name='cms_audit_action_idx'),
                    models.Index(fields=['object_type', 'object_id', 'created_at'], name='cms_audit_object_idx'),
                ],
            },
        ),
    ]
