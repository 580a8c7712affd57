"""Request handling: routing table, endpoint handlers and lifecycle hooks.

Modules
-------
messages
    Framework-independent request/response types.
router
    Ordered method + path routing with a logging pass.
handlers
    Upload, List, Get and Delete handlers and the static routing table.
lifecycle
    Install/activate hooks and request interception.
"""
