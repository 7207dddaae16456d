"""Unit tests for the chat error taxonomy."""

from fastapi import HTTPException

from app.core.exceptions import (
    ChatError,
    InvalidIdentifier,
    NotFoundError,
    StorageError,
    ValidationError,
)


def test_status_codes():
    assert ValidationError().status_code == 400
    assert InvalidIdentifier().status_code == 400
    assert NotFoundError().status_code == 404
    assert StorageError().status_code == 500


def test_errors_render_as_http_exceptions():
    error = NotFoundError("Message not found")
    assert isinstance(error, ChatError)
    assert isinstance(error, HTTPException)
    assert error.detail == "Message not found"


def test_default_detail_is_used_without_message():
    assert ValidationError().detail == "Message, image URL, or inline image is required"
    assert StorageError().detail == "Storage failure"
