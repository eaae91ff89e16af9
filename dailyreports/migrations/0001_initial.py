from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='EntryRow',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('entry_date', models.DateField()),
                ('site', models.CharField(max_length=255)),
                ('area', models.CharField(blank=True, max_length=255)),
                ('category_progress', models.JSONField(default=dict)),
                ('weather', models.TextField(blank=True)),
                ('obstacles', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('manpower', models.TextField(blank=True)),
                ('safety_incidents', models.TextField(blank=True, default='None')),
                ('materials_required', models.BooleanField(default=False)),
                ('material_items', models.JSONField(blank=True, default=list)),
                ('photo_urls', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Daily Report Entry',
                'verbose_name_plural': 'Daily Report Entries',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['site', 'entry_date'], name='dailyreport_site_date_idx')],
            },
        ),
    ]
