# Routes package init
"""
AccountHub Backend — API Routes Package
=========================================

Route Inventory:
    - groups.py:        GET /groups, GET|PUT|DELETE /group/{id}, POST /group
    - registration.py:  POST /register, GET /register/csrf-token,
                        GET /register/confirm/{token}
    - health.py:        GET /health

Routes are THIN: extract request data, call a service, shape the response.
"""
