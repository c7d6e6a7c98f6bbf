"""
Tessa Backend — API Routes Package
====================================

Route Inventory:
    - root.py:          GET  /                        (welcome payload)
    - health.py:        GET  /health                  (service health check)
    - auth.py:          POST /api/auth/register|login, GET /api/auth/me
    - projects.py:      CRUD /api/projects
    - subscriptions.py: GET  /api/plans, POST /api/subscriptions,
                        GET  /api/subscriptions/current
    - audio.py:         GET  /api/audio, POST /api/audio/analyze,
                        GET|DELETE /api/audio/{id}

Routes stay thin: extract request data, call a service, shape the response.
Errors propagate to the global handlers registered in tessa.main.
"""
