"""Static sample data for scenario scripts and tests."""

from __future__ import annotations

SAMPLE_USERS = [
    {"id": 1, "username": "testuser1", "email": "testuser1@example.com", "firstName": "John", "lastName": "Doe"},
    {"id": 2, "username": "testuser2", "email": "testuser2@example.com", "firstName": "Jane", "lastName": "Smith"},
    {"id": 3, "username": "testuser3", "email": "testuser3@example.com", "firstName": "Bob", "lastName": "Johnson"},
]

SAMPLE_POSTS = [
    {"id": 1, "title": "First Test Post", "body": "This is the body of the first test post", "userId": 1},
    {"id": 2, "title": "Second Test Post", "body": "This is the body of the second test post", "userId": 1},
    {"id": 3, "title": "Third Test Post", "body": "This is the body of the third test post", "userId": 2},
]

SAMPLE_COMMENTS = [
    {"id": 1, "postId": 1, "name": "Test Comment 1", "email": "commenter1@example.com", "body": "This is a test comment"},
    {"id": 2, "postId": 1, "name": "Test Comment 2", "email": "commenter2@example.com", "body": "This is another test comment"},
]

SAMPLE_TOKENS = {
    "valid": "valid-test-token-12345",
    "expired": "expired-test-token-67890",
    "invalid": "invalid-token",
}

ENDPOINTS = {
    "users": "/users",
    "posts": "/posts",
    "comments": "/comments",
    "albums": "/albums",
    "photos": "/photos",
    "todos": "/todos",
}

# Field lists scenario scripts pass to validate_response / has_required_fields
POST_REQUIRED_FIELDS = ["id", "title", "body", "userId"]
USER_REQUIRED_FIELDS = ["id", "username", "email"]

# Field -> JSON type name, for validate_schema
POST_SCHEMA = {"id": "number", "title": "string", "body": "string", "userId": "number"}
USER_SCHEMA = {"id": "number", "username": "string", "email": "string"}

CREATE_POST_PAYLOAD = {"title": "Performance Test Post", "body": "Created during a load test", "userId": 1}
UPDATE_POST_PAYLOAD = {"id": 1, "title": "Updated Test Post", "body": "Updated during a load test", "userId": 1}
