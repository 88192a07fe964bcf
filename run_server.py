#!/usr/bin/env python3
"""
Entrypoint script for running the SOCKS5 authentication server.

Configuration comes from the environment:
    AUTH_METHOD   no_auth | username_password | any (default: no_auth)
    USERNAME      required for username_password and any
    PASSWORD      required for username_password and any
    PORT          default 1080
    BIND_ADDRESS  default 0.0.0.0
    IDLE_TIMEOUT  seconds, default 300
    LOG_LEVEL     default INFO
"""

import asyncio
import logging
import os

from socks5auth import (
    NoAuthAuthenticator,
    Socks5Server,
    StaticCredentials,
    UserPassAuthenticator,
)

logger = logging.getLogger("socks5auth")


def build_auth_methods(auth_method, username, password):
    if auth_method == "no_auth":
        return [NoAuthAuthenticator()]

    if auth_method not in ("username_password", "any"):
        raise ValueError("AUTH_METHOD must be 'no_auth', 'username_password' or 'any'")
    if not username or password is None:
        raise ValueError(
            "USERNAME and PASSWORD environment variables must be set for "
            f"{auth_method} auth"
        )

    methods = [UserPassAuthenticator(StaticCredentials({username: password}))]
    if auth_method == "any":
        methods.append(NoAuthAuthenticator())
    return methods


def main():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    auth_methods = build_auth_methods(
        os.getenv("AUTH_METHOD", "no_auth").lower(),
        os.getenv("USERNAME"),
        os.getenv("PASSWORD"),
    )
    server = Socks5Server(
        auth_methods=auth_methods,
        idle_timeout=float(os.getenv("IDLE_TIMEOUT", "300")),
        bind_address=os.getenv("BIND_ADDRESS", "0.0.0.0"),
        bind_port=int(os.getenv("PORT", "1080")),
    )
    server.events.on(
        "authenticate",
        lambda ip, port, ctx: logger.info(
            "%s:%d authenticated with method %#04x", ip, port, ctx.method
        ),
    )

    async def run_server():
        await server.start()
        try:
            # Keep running until interrupted
            await asyncio.Future()
        finally:
            await server.stop()

    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        logger.info("Shutting down server...")


if __name__ == "__main__":
    main()
