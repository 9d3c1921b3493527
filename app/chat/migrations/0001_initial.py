"""
Initial chat schema.

Changes:
    - Create Conversation with canonical participant pair and
      one-per-pair-and-listing unique constraint
    - Create Message with cursor and partial unread indexes
"""

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("listings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Conversation",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
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
                    "last_message_at",
                    models.DateTimeField(
                        blank=True,
                        db_index=True,
                        help_text="Timestamp of most recent message (for sorting conversation lists)",
                        null=True,
                    ),
                ),
                (
                    "buyer",
                    models.ForeignKey(
                        help_text="Participant acting as buyer in this conversation",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="buying_conversations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "seller",
                    models.ForeignKey(
                        help_text="Participant acting as seller in this conversation",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="selling_conversations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "listing",
                    models.ForeignKey(
                        help_text="Listing this conversation is about",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="conversations",
                        to="listings.listing",
                    ),
                ),
                (
                    "participant_low",
                    models.ForeignKey(
                        editable=False,
                        help_text="Participant with the lower id (canonical pair order)",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "participant_high",
                    models.ForeignKey(
                        editable=False,
                        help_text="Participant with the higher id (canonical pair order)",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_conversation",
                "ordering": ["-last_message_at", "-created_at"],
                "indexes": [
                    models.Index(
                        fields=["buyer", "-last_message_at"],
                        name="chat_conv_buyer_idx",
                    ),
                    models.Index(
                        fields=["seller", "-last_message_at"],
                        name="chat_conv_seller_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["participant_low", "participant_high", "listing"],
                        name="unique_conversation_pair_listing",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("participant_low_id__lt", models.F("participant_high_id"))
                        ),
                        name="conversation_participant_low_lt_high",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("buyer_id", models.F("seller_id")), _negated=True
                        ),
                        name="conversation_buyer_not_seller",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
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
                ("content", models.TextField(help_text="Message text")),
                (
                    "is_read",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the recipient has read this message",
                    ),
                ),
                (
                    "read_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the recipient read this message",
                        null=True,
                    ),
                ),
                (
                    "conversation",
                    models.ForeignKey(
                        help_text="Conversation this message belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.conversation",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent this message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["conversation", "created_at", "id"],
                        name="chat_msg_conv_cursor_idx",
                    ),
                    models.Index(
                        condition=models.Q(("is_read", False)),
                        fields=["conversation", "sender"],
                        name="chat_msg_conv_unread_idx",
                    ),
                ],
            },
        ),
    ]
