# api/index.py
"""Serverless entrypoint: hands the platform event to the project's WSGI app."""
import sys
from pathlib import Path

from serverless_wsgi import handle_request

# project root, so performance_review / review_app import from the function bundle
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from performance_review.wsgi import application  # noqa: E402


def handler(event, context):
    return handle_request(application, event, context)
