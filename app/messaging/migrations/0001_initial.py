# Generated manually - Conversation and Message tables

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Conversation",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "item_id",
                    models.UUIDField(
                        blank=True,
                        db_index=True,
                        help_text="Catalog item this conversation is about, if any",
                        null=True,
                    ),
                ),
                (
                    "last_message_at",
                    models.DateTimeField(
                        db_index=True,
                        help_text="Timestamp of the most recent message",
                    ),
                ),
                (
                    "participant_1",
                    models.ForeignKey(
                        help_text="User who sent the first message",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="conversations_started",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "participant_2",
                    models.ForeignKey(
                        help_text="User who received the first message",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="conversations_received",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "participant_high",
                    models.ForeignKey(
                        help_text="Participant with the higher id (canonical pair order)",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "participant_low",
                    models.ForeignKey(
                        help_text="Participant with the lower id (canonical pair order)",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "messaging_conversation",
                "ordering": ["-last_message_at", "-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["participant_1", "-last_message_at"],
                        name="messaging_conv_p1_recent_idx",
                    ),
                    models.Index(
                        fields=["participant_2", "-last_message_at"],
                        name="messaging_conv_p2_recent_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("participant_low_id__lt", models.F("participant_high_id"))
                        ),
                        name="messaging_conversation_low_lt_high",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("item_id__isnull", False)),
                        fields=("participant_low", "participant_high", "item_id"),
                        name="messaging_conversation_unique_pair_item",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("item_id__isnull", True)),
                        fields=("participant_low", "participant_high"),
                        name="messaging_conversation_unique_pair_no_item",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "item_id",
                    models.UUIDField(
                        blank=True,
                        help_text="Catalog item the message is about, if any",
                        null=True,
                    ),
                ),
                (
                    "content",
                    models.TextField(help_text="Message text (trimmed, never empty)"),
                ),
                (
                    "is_read",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the recipient has read this message",
                    ),
                ),
                (
                    "from_user",
                    models.ForeignKey(
                        help_text="User who sent the message",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="messages_sent",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "to_user",
                    models.ForeignKey(
                        help_text="User the message is addressed to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="messages_received",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "messaging_message",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["from_user", "to_user", "created_at"],
                        name="messaging_msg_pair_time_idx",
                    ),
                    models.Index(
                        fields=["to_user", "is_read"],
                        name="messaging_msg_unread_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("from_user", models.F("to_user")), _negated=True
                        ),
                        name="messaging_message_not_self",
                    ),
                ],
            },
        ),
    ]
