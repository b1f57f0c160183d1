"""Core client logic.

Module Structure:
    - keycloak/       : Keycloak token acquisition and user creation
    - identity/       : Logipad identity API client (user list)
    - user_mapper.py  : JSON user list → UserRecord mapping
    - validators.py   : Input validation for user creation

Usage Pattern:
    Import explicitly when needed:
        from logipad.core.keycloak import KeycloakClient, UserInfo, UserService
        from logipad.core.identity import LogipadClient
        from logipad.core.user_mapper import map_records, map_payload, UserRecord
"""
