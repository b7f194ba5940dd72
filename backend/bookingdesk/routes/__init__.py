# Routes package init
"""
BookingDesk Backend — API Routes Package
==========================================

Route Inventory:
    - businesses.py:    /businesses/...    (list, get, create, delete, images)
    - clients.py:       /clients/...       (list, get, create, delete, images)
    - appointments.py:  /appointments/...  (list, get, create, delete)
    - health.py:        GET /health
    - common.py:        app.state getters and the shared image handlers

Routes stay thin: they check input rules, call a Repository or the
ImageManager, and return the record. Errors are raised, never rendered here.
"""
