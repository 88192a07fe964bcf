"""
Protocol constants for the SOCKS5 authentication handshake.

Values follow RFC 1928 (method selection) and RFC 1929 (username/password).
"""

from enum import IntEnum

SOCKS_VERSION = 0x05
USER_AUTH_VERSION = 0x01


class AuthMethod(IntEnum):
    NO_AUTH = 0x00
    GSSAPI = 0x01  # reserved, not implemented
    USERNAME_PASSWORD = 0x02
    NO_ACCEPTABLE = 0xFF


class AuthStatus(IntEnum):
    SUCCESS = 0x00
    FAILURE = 0x01
