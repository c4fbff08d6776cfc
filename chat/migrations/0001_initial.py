import django.db.models.deletion
import django.utils.timezone
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ChatMessage',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('conversation_id', models.CharField(db_index=True, max_length=255)),
                ('sender_id', models.CharField(max_length=128)),
                ('sender_type', models.CharField(choices=[('user', 'User'), ('medical_officer', 'Medical Officer'), ('admin', 'Admin')], max_length=20)),
                ('receiver_id', models.CharField(max_length=128)),
                ('receiver_type', models.CharField(choices=[('user', 'User'), ('medical_officer', 'Medical Officer'), ('admin', 'Admin')], max_length=20)),
                ('message', models.TextField()),
                ('message_type', models.CharField(choices=[('text', 'Text'), ('image', 'Image'), ('file', 'File')], default='text', max_length=10)),
                ('is_read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['created_at'],
                'indexes': [models.Index(fields=['conversation_id', '-created_at'], name='chat_conversation_idx')],
            },
        ),
        migrations.CreateModel(
            name='PublishedMessage',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('content', models.TextField()),
                ('author_id', models.CharField(max_length=128)),
                ('author_name', models.CharField(max_length=150)),
                ('author_type', models.CharField(default='medical_officer', max_length=20)),
                ('author_specialization', models.CharField(blank=True, max_length=30)),
                ('category', models.CharField(choices=[('medical_advice', 'Medical Advice'), ('safety_tips', 'Safety Tips'), ('emergency_guidance', 'Emergency Guidance'), ('prevention', 'Prevention'), ('treatment', 'Treatment')], default='medical_advice', max_length=30)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('published_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('view_count', models.PositiveIntegerField(default=0)),
                ('like_count', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('original_message', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='publications', to='chat.chatmessage')),
                ('published_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='published_messages', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-published_at'],
            },
        ),
    ]
