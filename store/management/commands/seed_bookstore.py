"""
Management command to seed staff accounts and a starter catalog.
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from store.infra.models import BookORM, UserORM
from store.infra.repositories import BookRepository, UserRepository

SAMPLE_BOOKS = [
    {"title": "The Pragmatic Programmer", "author": "David Thomas", "genre": "Technology", "price": Decimal("39.99")},
    {"title": "Dune", "author": "Frank Herbert", "genre": "Science Fiction", "price": Decimal("18.50")},
    {"title": "Pride and Prejudice", "author": "Jane Austen", "genre": "Classics", "price": Decimal("9.99")},
    {"title": "The Hobbit", "author": "J. R. R. Tolkien", "genre": "Fantasy", "price": Decimal("14.25")},
    {"title": "Sapiens", "author": "Yuval Noah Harari", "genre": "History", "price": Decimal("22.00")},
]


class Command(BaseCommand):
    help = 'Create admin and staff accounts and a sample catalog'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            default='changeme123',
            help='Password for the seeded accounts',
        )
        parser.add_argument(
            '--stock',
            type=int,
            default=20,
            help='Initial inventory for each sample book',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        users = UserRepository()
        books = BookRepository()

        for username, role in (("admin", "Admin"), ("staff", "Staff")):
            if UserORM.objects.filter(username=username).exists():
                self.stdout.write(f'User {username} already exists')
                continue
            user = users.create_user(
                username=username,
                role=role,
                full_name=f"Bookstore {role}",
                email=f"{username}@bookstore.local",
                password=options['password'],
            )
            self.stdout.write(self.style.SUCCESS(f'Created {role} user {username} ({user.id})'))

        created = 0
        for fields in SAMPLE_BOOKS:
            if BookORM.objects.filter(title=fields["title"]).exists():
                continue
            books.create(inventory_count=options['stock'], **fields)
            created += 1

        self.stdout.write(self.style.SUCCESS(f'Created {created} books'))
