import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("store", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="BookmarkORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("book", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookmarks", to="store.bookorm")),
                ("member", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookmarks", to="store.memberprofileorm")),
            ],
            options={
                "indexes": [models.Index(fields=["member", "-created_at"], name="store_bookmark_member_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("member", "book"), name="bookmark_unique_member_book"),
                ],
            },
        ),
    ]
