import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('trips', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('key', models.CharField(blank=True, max_length=255)),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('notification_type', models.CharField(choices=[('budget_alert', 'Budget Alert'), ('trip_reminder', 'Trip Reminder'), ('trip_event', 'Trip Event'), ('expense_event', 'Expense Event'), ('general', 'General')], default='general', max_length=20)),
                ('read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('trip', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='notifications', to='trips.trip')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'notifications',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'read'], name='notifications_user_read_idx'),
                    models.Index(fields=['user', '-created_at'], name='notifications_user_new_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='NotificationMarker',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notification_markers', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'notification_markers',
                'constraints': [models.UniqueConstraint(fields=('user', 'key'), name='unique_notification_marker')],
            },
        ),
        migrations.CreateModel(
            name='DailyNotificationQuota',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('day', models.DateField()),
                ('sent_count', models.PositiveIntegerField(default=0)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notification_quotas', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'notification_daily_quotas',
                'constraints': [models.UniqueConstraint(fields=('user', 'day'), name='unique_daily_quota')],
            },
        ),
    ]
