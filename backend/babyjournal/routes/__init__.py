# Routes package init
"""
BabyJournal Backend — API Routes Package
=========================================

Route Inventory:
    - auth.py:      /api/auth/register, /login, /logout, /session
    - journals.py:  /api/journals, /api/journals/active,
                    /api/journals/{journal_id}[/share|/shared-users[/{user_id}]]
    - events.py:    /api/journals/{journal_id}/events[/{event_id}]
    - memories.py:  /api/journals/{journal_id}/memories[/{memory_id}]
    - backup.py:    /api/backup/export/{journal_id}
    - settings.py:  /api/settings/user, /api/admin/site-settings
    - media.py:     /media/{path}
    - health.py:    /health

Routes stay thin: parse the request, resolve identity and journal access
through dependencies, call one service method, shape the response.
"""
