"""
Pytest configuration for Django tests.

pytest-django sets up the test database; Django's test environment swaps in
the locmem email backend, so sent mail lands in ``django.core.mail.outbox``.
"""
import os

# Set the Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'bookstore.settings')
