import uuid
from decimal import Decimal

import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="UserORM",
            fields=[
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("full_name", models.CharField(blank=True, default="", max_length=255)),
                ("role", models.CharField(choices=[("Member", "Member"), ("Staff", "Staff"), ("Admin", "Admin")], default="Member", max_length=16)),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
                "indexes": [models.Index(fields=["role"], name="store_user_role_idx")],
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="MemberProfileORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("phone_number", models.CharField(blank=True, default="", max_length=32)),
                ("joined_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("total_orders", models.PositiveIntegerField(default=0)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="member_profile", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="BookORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("author", models.CharField(max_length=255)),
                ("isbn", models.CharField(blank=True, default="", max_length=20)),
                ("description", models.TextField(blank=True, default="")),
                ("genre", models.CharField(blank=True, default="", max_length=64)),
                ("publisher", models.CharField(blank=True, default="", max_length=128)),
                ("language", models.CharField(default="English", max_length=32)),
                ("format", models.CharField(default="Paperback", max_length=32)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.01"))])),
                ("inventory_count", models.IntegerField(default=0)),
                ("total_sold", models.IntegerField(default=0)),
                ("published_date", models.DateField(blank=True, null=True)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["title"], name="store_book_title_idx"),
                    models.Index(fields=["-total_sold"], name="store_book_sold_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("inventory_count__gte", 0)), name="book_inventory_non_negative"),
                    models.CheckConstraint(condition=models.Q(("total_sold__gte", 0)), name="book_total_sold_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CartItemORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(99)])),
                ("book", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="cart_items", to="store.bookorm")),
                ("member", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="cart_items", to="store.memberprofileorm")),
            ],
            options={
                "indexes": [models.Index(fields=["member"], name="store_cart_member_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("member", "book"), name="cart_item_unique_book"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=12)),
                ("discount_percentage", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("discount_description", models.CharField(blank=True, default="", max_length=100)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("claim_code", models.CharField(max_length=50, unique=True)),
                ("note", models.TextField(blank=True, default="")),
                ("is_processed", models.BooleanField(default=False)),
                ("is_cancelled", models.BooleanField(default=False)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("member", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="store.memberprofileorm")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["member", "-order_date"], name="store_order_member_date_idx"),
                    models.Index(fields=["is_processed", "is_cancelled"], name="store_order_state_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("is_processed", True), ("is_cancelled", True), _negated=True), name="order_single_terminal_state"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItemORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("book", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="order_items", to="store.bookorm")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="store.orderorm")),
            ],
            options={
                "indexes": [models.Index(fields=["order"], name="store_orderitem_order_idx")],
            },
        ),
        migrations.CreateModel(
            name="ReviewORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("rating", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("comment", models.CharField(max_length=1000)),
                ("book", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to="store.bookorm")),
                ("member", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to="store.memberprofileorm")),
            ],
            options={
                "indexes": [models.Index(fields=["book", "-created_at"], name="store_review_book_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("book", "member"), name="review_unique_member_book"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ActivityEvent",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("aggregate_id", models.UUIDField()),
                ("event_type", models.CharField(max_length=100)),
                ("event_data", models.JSONField()),
                ("message", models.CharField(max_length=255)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["event_type", "-created_at"], name="store_activity_type_idx")],
            },
        ),
    ]
