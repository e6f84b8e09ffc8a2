"""
PhotoShare Backend — API Routes Package
=========================================

What:  HTTP route handlers, one module per resource.

Route Inventory:
    - auth.py:           /api/auth          register, login, me
    - photos.py:         /api/photos        list, search, trending, detail, image, upload, delete
    - comments.py:       /api/photos/{id}/comments
    - ratings.py:        /api/photos/{id}/ratings
    - likes.py:          /api/likes/{photoId}
    - users.py:          /api/users         profiles, user photos and likes, PATCH /me
    - follows.py:        /api/follows/{userId}
    - notifications.py:  /api/notifications
    - collections.py:    /api/collections
    - admin.py:          /api/admin
    - health.py:         /api/health

Design Principle:
    Routes stay THIN: they extract path, query, body and form data, resolve
    the caller through the security dependencies and call a service. Business
    rules and error decisions live in services and surface as PhotoShareError
    subclasses, which main.py turns into JSON error bodies.
"""
