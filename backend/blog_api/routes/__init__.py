# Routes package init
"""
Oleang Blog API: API Routes Package
===================================

What:  HTTP route handlers; thin wrappers over the services.

Route Inventory:
    - posts.py:    GET  /api/posts, POST /api/posts, GET /api/posts/{id}
    - likes.py:    POST /api/isLiked, POST /api/likes, POST /api/unlike
    - comments.py: GET  /api/comments/{post_id}, POST /api/comments/{post_id}
    - users.py:    POST /api/signup, POST /api/login, PUT /api/update_user
    - health.py:   GET  /health, GET /health/ready
"""
